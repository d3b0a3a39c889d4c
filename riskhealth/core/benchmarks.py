import json
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional
from loguru import logger
from pydantic import ValidationError
from riskhealth.errors import BenchmarkConfigError
from riskhealth.models.health import CategoryBenchmark
from riskhealth.models.risk import RiskCategory

FALLBACK_CATEGORY = RiskCategory.OPERATIONAL.value

# Thresholds on the raw 0-85 scale; weights sum to 1.0.
DEFAULT_BENCHMARKS = {
    RiskCategory.STRATEGIC.value:   CategoryBenchmark(target=75, good=65, acceptable=50, weight=0.30),
    RiskCategory.FINANCIAL.value:   CategoryBenchmark(target=75, good=65, acceptable=50, weight=0.25),
    RiskCategory.OPERATIONAL.value: CategoryBenchmark(target=70, good=60, acceptable=45, weight=0.20),
    RiskCategory.COMPLIANCE.value:  CategoryBenchmark(target=80, good=70, acceptable=55, weight=0.15),
    RiskCategory.REGULATORY.value:  CategoryBenchmark(target=80, good=70, acceptable=55, weight=0.10),
}


class CategoryBenchmarks:
    """Read-only benchmark table with a named fallback row."""

    def __init__(self, rows: Mapping[str, CategoryBenchmark],
                 fallback: str = FALLBACK_CATEGORY):
        if fallback not in rows:
            raise BenchmarkConfigError(f"Benchmark table has no '{fallback}' fallback row.")
        self._rows = MappingProxyType(dict(rows))
        self.fallback = fallback

    def get(self, category: str) -> CategoryBenchmark:
        return self._rows.get(category, self._rows[self.fallback])

    def is_known(self, category: str) -> bool:
        return category in self._rows

    @property
    def categories(self) -> list[str]:
        return list(self._rows)

    @property
    def total_weight(self) -> float:
        return sum(b.weight for b in self._rows.values())

    def __len__(self):
        return len(self._rows)

    @classmethod
    def from_file(cls, path) -> "CategoryBenchmarks":
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise BenchmarkConfigError(f"Benchmark file not found: {path}")
        except json.JSONDecodeError as e:
            raise BenchmarkConfigError(f"Benchmark file {path} is not valid JSON: {e}")
        except UnicodeDecodeError as e:
            raise BenchmarkConfigError(f"Benchmark file {path} is not UTF-8 encoded: {e}")
        except OSError as e:
            raise BenchmarkConfigError(f"Cannot read benchmark file {path}: {e}")
        if not isinstance(raw, dict):
            raise BenchmarkConfigError(f"Benchmark file {path} must hold an object keyed by category.")

        rows = {}
        for category, values in raw.items():
            try:
                rows[category] = CategoryBenchmark(**values)
            except (TypeError, ValidationError) as e:
                raise BenchmarkConfigError(f"Invalid benchmark for '{category}': {e}")
        table = cls(rows)
        if abs(table.total_weight - 1.0) > 1e-6:
            logger.warning(
                f"Benchmark weights in {path} sum to {table.total_weight:.2f}; "
                "overall score will be re-normalized."
            )
        logger.info(f"Loaded {len(table)} category benchmarks from {path}")
        return table


DEFAULT_TABLE = CategoryBenchmarks(DEFAULT_BENCHMARKS)


def get_category_benchmark(category: str,
                           benchmarks: Optional[CategoryBenchmarks] = None) -> CategoryBenchmark:
    return (benchmarks or DEFAULT_TABLE).get(category)


def load_benchmarks(path=None) -> CategoryBenchmarks:
    if not path:
        return DEFAULT_TABLE
    return CategoryBenchmarks.from_file(path)
