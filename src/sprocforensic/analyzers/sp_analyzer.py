"""Stored procedure analyzer — runs signature parsing through module assignment per block."""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, Mapping

from sprocforensic.analyzers.anti_pattern_analyzer import AntiPatternDetector, AntiPatternProfile
from sprocforensic.analyzers.reference_analyzer import ReferenceExtractor
from sprocforensic.classifiers.complexity import classify_complexity
from sprocforensic.classifiers.crud_classifier import CrudClassifier
from sprocforensic.classifiers.module_assigner import ModuleAssigner
from sprocforensic.config import AnalysisConfig, ModuleRules
from sprocforensic.parsers.block_splitter import RawBlock
from sprocforensic.parsers.sp_parser import Parameter, ParsedProcedure, SignatureParser
from sprocforensic.utils.sql_text import count_lines, preview_lines, strip_comments

logger = logging.getLogger(__name__)


@dataclass
class ClassifiedProcedure:
    """A parsed procedure with its derived facts and classification."""

    schema: str
    name: str
    parameters: list[Parameter] = field(default_factory=list)
    body: str = ""
    line_count: int = 0
    body_preview: str = ""
    tables_referenced: list[str] = field(default_factory=list)
    sprocs_called: list[str] = field(default_factory=list)
    crud_type: str = "mixed"
    anti_patterns: AntiPatternProfile = field(default_factory=AntiPatternProfile)
    complexity: str = "trivial"
    module: str = ""
    module_strategy: str = ""
    called_from_code: list[str] = field(default_factory=list)
    called_by_sprocs: list[str] = field(default_factory=list)
    start_line: int = 1

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.name}"

    @property
    def sort_key(self) -> tuple[str, str, str, str]:
        return (self.name.lower(), self.name, self.schema.lower(), self.schema)


@dataclass
class AnalysisResult:
    """Procedures recovered from a set of blocks plus the failure count."""

    procedures: list[ClassifiedProcedure] = field(default_factory=list)
    parse_failures: int = 0
    blocks: int = 0


class SPAnalyzer:
    """Analyze procedure blocks: signature, anti-patterns, references, classification.

    Each block is processed independently, so blocks can be farmed out to a
    process pool; results keep the input block order either way.
    """

    def __init__(
        self,
        known_tables: AbstractSet[str] | None = None,
        rules: ModuleRules | None = None,
        module_hints: Mapping[str, str] | None = None,
        config: AnalysisConfig | None = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.parser = SignatureParser()
        self.detector = AntiPatternDetector()
        self.extractor = ReferenceExtractor(known_tables)
        self.crud = CrudClassifier()
        self.assigner = ModuleAssigner(rules, module_hints)

    def analyze(self, blocks: Iterable[RawBlock]) -> AnalysisResult:
        """Analyze all blocks.

        Returns:
            AnalysisResult with one procedure per successfully parsed block,
            in block order.
        """
        block_list = list(blocks)
        logger.info(
            "Starting stored procedure analysis (%d blocks, %d workers)",
            len(block_list),
            self.config.workers,
        )

        if self.config.workers > 1 and len(block_list) > 1:
            chunk_size = self.config.chunk_size or max(
                1, len(block_list) // (self.config.workers * 4)
            )
            with ProcessPoolExecutor(max_workers=self.config.workers) as executor:
                outcomes = list(executor.map(self.analyze_block, block_list, chunksize=chunk_size))
        else:
            outcomes = [self.analyze_block(block) for block in block_list]

        result = AnalysisResult(blocks=len(block_list))
        for outcome in outcomes:
            if outcome is None:
                result.parse_failures += 1
            else:
                result.procedures.append(outcome)

        logger.info(
            "SP analysis complete: %d parsed, %d failures",
            len(result.procedures),
            result.parse_failures,
        )
        return result

    def analyze_block(self, block: RawBlock) -> ClassifiedProcedure | None:
        """Run stages 2-6 on one block; None means the block could not be parsed.

        Unexpected errors are logged and reported as a failure so that one bad
        block never stops the run.
        """
        try:
            parsed = self.parser.parse(block.text, start_line=block.start_line)
            if parsed is None:
                logger.debug("Could not extract procedure name at line %d", block.start_line)
                return None
            return self.classify(parsed)
        except Exception:
            logger.warning(
                "Failed to analyze procedure block at line %d, skipping",
                block.start_line,
                exc_info=True,
            )
            return None

    def classify(self, parsed: ParsedProcedure) -> ClassifiedProcedure:
        """Derive facts and classification for one parsed procedure."""
        stripped = strip_comments(parsed.body)

        profile = self.detector.detect(stripped)
        tables = self.extractor.extract_tables(stripped)
        calls = self.extractor.extract_procedure_calls(stripped, own_name=parsed.name)
        line_count = count_lines(parsed.body)
        assignment = self.assigner.assign(parsed.name, parsed.schema, tables)

        return ClassifiedProcedure(
            schema=parsed.schema,
            name=parsed.name,
            parameters=parsed.parameters,
            body=parsed.body,
            line_count=line_count,
            body_preview=preview_lines(parsed.body, self.config.preview_lines),
            tables_referenced=tables,
            sprocs_called=calls,
            crud_type=self.crud.classify(parsed.name, stripped),
            anti_patterns=profile,
            complexity=classify_complexity(line_count, len(tables), profile),
            module=assignment.module,
            module_strategy=assignment.strategy,
            start_line=parsed.start_line,
        )
