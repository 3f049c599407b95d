# moving_object/fusion/stats.py

from collections import Counter
from typing import Dict, List, Union

from moving_object.errors import ErrorKind, FusionError


class FusionStats:
    """
    Counters for fusion events, shared by the registry and its frames.

    Each error kind has its own counter. Skip reasons and stream starvation
    are counted under plain names so operators can tell, for example, that
    localizations chronically fail to arrive.
    """

    def __init__(self):
        self.errors: Counter = Counter({kind: 0 for kind in ErrorKind})
        self.counters: Counter = Counter()
        self.timing: Dict[str, List[float]] = {
            'merge': [],
            'publish': [],
        }

    def record_error(self, error: Union[ErrorKind, FusionError], count: int = 1) -> None:
        """Count an error by kind, or by the kind of a FusionError instance."""
        kind = error.kind if isinstance(error, FusionError) else error
        self.errors[kind] += count

    def increment(self, name: str, count: int = 1) -> None:
        self.counters[name] += count

    def record_time(self, stage: str, seconds: float) -> None:
        self.timing.setdefault(stage, []).append(seconds)

    def error_count(self, kind: ErrorKind) -> int:
        return self.errors[kind]

    def count(self, name: str) -> int:
        return self.counters[name]

    def report(self) -> Dict[str, float]:
        """
        Summarize all counters and timings.

        Returns:
            Flat dict with one entry per error kind, one per counter and
            avg/max timings per stage
        """
        report = {f"errors.{kind.value}": count for kind, count in self.errors.items()}
        report.update(self.counters)

        for stage, times in self.timing.items():
            if times:
                report[f"avg_{stage}_time"] = sum(times) / len(times)
                report[f"max_{stage}_time"] = max(times)

        return report

    def reset(self) -> None:
        self.errors = Counter({kind: 0 for kind in ErrorKind})
        self.counters = Counter()
        for key in self.timing:
            self.timing[key] = []
