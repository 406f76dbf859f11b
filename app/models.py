"""
Extraction Value Types

Key Types:
- FileRecord: the uploaded file, decoded once from the multipart body
- StrategyOutcome: what a single extraction strategy produced
- ExtractionResult: accepted text and the strategy that produced it
- ExtractionFailure: classified failure with per-strategy diagnostics
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple
import enum
import os


class StrategyId(enum.Enum):
    PDF = "pdf"
    WORD = "word"
    PLAIN_TEXT = "plain_text"
    RAW_DECODE = "raw_decode"


class FailureKind(enum.Enum):
    MALFORMED_REQUEST = "malformed_request"
    NO_FILE_PART = "no_file_part"
    NO_READABLE_TEXT = "no_readable_text"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class FileRecord:
    name: str
    content: bytes
    declared_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name or "")[1].lower()

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StrategyOutcome:
    strategy_id: StrategyId
    succeeded: bool
    text: Optional[str] = None
    failure_reason: Optional[str] = None

    @classmethod
    def success(cls, strategy_id: StrategyId, text: str) -> "StrategyOutcome":
        return cls(strategy_id=strategy_id, succeeded=True, text=text)

    @classmethod
    def failure(cls, strategy_id: StrategyId, reason: str) -> "StrategyOutcome":
        return cls(strategy_id=strategy_id, succeeded=False, failure_reason=reason)

    def describe(self) -> str:
        return f"{self.strategy_id.value}: {self.failure_reason or 'ok'}"


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    strategy_id: StrategyId
    outcomes: Tuple[StrategyOutcome, ...] = ()

    ok = True


@dataclass(frozen=True)
class ExtractionFailure:
    kind: FailureKind
    detail: str
    outcomes: Tuple[StrategyOutcome, ...] = ()

    ok = False

    @property
    def reasons(self) -> List[str]:
        """One diagnostic line per attempted strategy"""
        return [o.describe() for o in self.outcomes if not o.succeeded]
