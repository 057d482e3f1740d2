"""Multi-pass OCR candidate extraction and ranking.

The orchestrator runs the OCR engine once per configured segmentation mode
and pools every token it produces:

    1. COLLECTION: word tokens, then one full-text token, per pass
    2. NORMALIZATION: strip to [A-Z0-9], keep lengths in the token window
    3. FILTERING: drop candidates shorter than the plate floor or in the
       noise vocabulary
    4. SCORING + SELECTION: fold all survivors in collection order and keep
       the first one that strictly beats the running best

Every token is numbered when collected (pass order, then word order, the
full-text token last), and the fold always walks that order. Running the
passes concurrently therefore gives the same answer as running them one
after another.

Example:
    >>> orchestrator = MultiPassOrchestrator(TesseractEngine(cfg.engine), cfg)
    >>> orchestrator.extract_via_ocr(image)
    'ABC123'
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

import numpy as np

from .config_loader import PlateOCRModuleConfig
from .normalizer import build_vocabulary, is_noise, is_within_length, normalize
from .scorer import CandidateScorer
from .types import (
    ExtractionResult,
    ExtractionSource,
    PassOutcome,
    RawToken,
    RecognitionOutput,
    ScoredCandidate,
    SegmentationMode,
)

logger = logging.getLogger(__name__)


class MultiPassOrchestrator:
    """Runs OCR passes and selects the most plate-like candidate.

    Args:
        engine: OCR engine exposing ``recognize(image, mode)``.
        config: Plate OCR module configuration.

    Attributes:
        modes: Segmentation modes in pass order.
        vocabulary: Noise vocabulary used for filtering.
        scorer: Candidate scorer.
    """

    def __init__(self, engine, config: PlateOCRModuleConfig):
        self.engine = engine
        self.config = config
        self.modes: List[SegmentationMode] = list(config.engine.modes)
        self.vocabulary = build_vocabulary(config.noise.extra_words)
        self.scorer = CandidateScorer(config.scoring)

        logger.info(
            f"MultiPassOrchestrator initialized: "
            f"modes={[m.label for m in self.modes]}, "
            f"token_window=[{config.candidates.min_token_length}, "
            f"{config.candidates.max_token_length}], "
            f"min_plate_length={config.candidates.min_plate_length}"
        )

    # ═══════════════════════════════════════════════════════════════
    # COLLECTION
    # ═══════════════════════════════════════════════════════════════

    def run_pass(self, image: np.ndarray, mode: SegmentationMode) -> PassOutcome:
        """Run one OCR pass and collect its tokens.

        Engine errors are not propagated: the pass is reported as failed
        and contributes no tokens.

        Args:
            image: Decoded image.
            mode: Segmentation mode for the pass.

        Returns:
            PassOutcome with normalized tokens (sequence numbers unset).
        """
        logger.debug(f"Trying OCR with {mode.label} mode...")
        try:
            output = self.engine.recognize(image, mode)
        except Exception as e:
            logger.warning(f"{mode.label} pass failed: {e}")
            return PassOutcome(mode=mode, success=False, error=str(e))

        return PassOutcome(mode=mode, success=True, tokens=self._tokens_from_output(output, mode))

    def _tokens_from_output(
        self, output: RecognitionOutput, mode: SegmentationMode
    ) -> List[RawToken]:
        candidates = self.config.candidates
        tokens: List[RawToken] = []

        for word in output.words:
            text = normalize(word.text)
            if is_within_length(text, candidates.min_token_length, candidates.max_token_length):
                tokens.append(
                    RawToken(text=text, confidence=float(word.confidence or 0), source=mode.label)
                )

        full_text = normalize(output.full_text)
        if is_within_length(full_text, candidates.min_token_length, candidates.max_token_length):
            tokens.append(
                RawToken(
                    text=full_text,
                    confidence=candidates.full_text_confidence,
                    source=f"{mode.label}-full",
                )
            )

        return tokens

    def collect(self, image: np.ndarray) -> List[PassOutcome]:
        """Run all passes sequentially in configured order."""
        outcomes = [self.run_pass(image, mode) for mode in self.modes]
        self._assign_sequence(outcomes)
        return outcomes

    async def collect_async(self, image: np.ndarray) -> List[PassOutcome]:
        """Run all passes concurrently in worker threads.

        ``asyncio.gather`` returns outcomes in mode order regardless of which
        pass finishes first, so sequence numbers match ``collect``.
        """
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self.run_pass, image, mode) for mode in self.modes)
        )
        outcomes = list(outcomes)
        self._assign_sequence(outcomes)
        return outcomes

    @staticmethod
    def _assign_sequence(outcomes: Sequence[PassOutcome]) -> None:
        sequence = 0
        for outcome in outcomes:
            for token in outcome.tokens:
                token.sequence = sequence
                sequence += 1

    # ═══════════════════════════════════════════════════════════════
    # FILTERING + SCORING
    # ═══════════════════════════════════════════════════════════════

    def rank_candidates(self, tokens: Sequence[RawToken]) -> List[ScoredCandidate]:
        """Filter and score collected tokens.

        Args:
            tokens: Normalized tokens from all passes.

        Returns:
            Scored survivors in collection order.
        """
        min_plate_length = self.config.candidates.min_plate_length
        scored: List[ScoredCandidate] = []

        for token in tokens:
            if len(token.text) < min_plate_length:
                logger.debug(f"Skipping too short: {token.text}")
                continue
            if is_noise(token.text, self.vocabulary):
                logger.debug(f"Filtered out: {token.text}")
                continue
            scored.append(self.scorer.score_token(token))

        return scored

    def select_best(self, candidates: Sequence[ScoredCandidate]) -> Optional[ScoredCandidate]:
        """Pick the winning candidate.

        Candidates are folded by ascending sequence number; a candidate
        replaces the current best only with a strictly greater score, so on
        ties the earliest collected one wins. Nothing is selected unless it
        scores above ``scoring.min_score``.

        Returns:
            Winning candidate or None.
        """
        best: Optional[ScoredCandidate] = None
        best_score = self.config.scoring.min_score

        for candidate in sorted(candidates, key=lambda c: c.token.sequence):
            if candidate.score > best_score:
                best = candidate
                best_score = candidate.score

        return best

    def evaluate(self, outcomes: Sequence[PassOutcome]) -> ExtractionResult:
        """Rank the tokens of finished passes and build the report."""
        tokens = [token for outcome in outcomes for token in outcome.tokens]
        candidates = self.rank_candidates(tokens)
        best = self.select_best(candidates)

        failed = [o.mode.label for o in outcomes if o.is_failure()]
        if failed:
            logger.warning(f"OCR passes contributed no candidates after failing: {failed}")

        if best is None:
            logger.info(f"No plausible plate among {len(tokens)} tokens")
            return ExtractionResult(
                text="",
                source=ExtractionSource.NONE,
                candidates=candidates,
                passes=list(outcomes),
            )

        logger.info(
            f"Best candidate: '{best.text}' with score: {best.score:.0f} "
            f"(source={best.token.source})"
        )
        return ExtractionResult(
            text=best.text,
            source=ExtractionSource.OCR,
            candidates=candidates,
            passes=list(outcomes),
        )

    # ═══════════════════════════════════════════════════════════════
    # ENTRY POINTS
    # ═══════════════════════════════════════════════════════════════

    def extract_report(self, image: np.ndarray) -> ExtractionResult:
        start_time = time.perf_counter()
        result = self.evaluate(self.collect(image))
        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        return result

    async def extract_report_async(self, image: np.ndarray) -> ExtractionResult:
        start_time = time.perf_counter()
        result = self.evaluate(await self.collect_async(image))
        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        return result

    def extract_via_ocr(self, image: np.ndarray) -> str:
        """Return the best OCR candidate, or an empty string."""
        return self.extract_report(image).text

    async def extract_via_ocr_async(self, image: np.ndarray) -> str:
        """Coroutine form of ``extract_via_ocr`` with concurrent passes."""
        return (await self.extract_report_async(image)).text
