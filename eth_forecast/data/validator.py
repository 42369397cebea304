"""
Data validation module for quality checks and data integrity.

Provides validation including:
- Schema validation
- Data type checks
- Missing value analysis
- Positive price checks (required by the log transform)
- Daily temporal consistency checks
- Outlier detection
"""

import logging
from datetime import datetime, timedelta
from typing import List, Any
from dataclasses import dataclass, field

import pandas as pd
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a single validation check."""
    name: str
    passed: bool
    message: str
    details: Any = None


@dataclass
class ValidationReport:
    """Complete validation report."""
    timestamp: datetime
    row_count: int
    column_count: int
    results: List[ValidationResult] = field(default_factory=list)

    CRITICAL_CHECKS = ('schema', 'data_types', 'value_ranges', 'temporal_consistency')

    @property
    def all_passed(self) -> bool:
        """Check if all validations passed."""
        return all(r.passed for r in self.results)

    @property
    def critical_passed(self) -> bool:
        """Check if critical validations passed."""
        return all(
            r.passed for r in self.results
            if r.name in self.CRITICAL_CHECKS
        )

    @property
    def failures(self) -> List[ValidationResult]:
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        """Generate summary string."""
        lines = [
            f"Validation Report - {self.timestamp}",
            f"Shape: {self.row_count} rows × {self.column_count} columns",
            f"Overall: {'PASSED' if self.all_passed else 'FAILED'}",
            "",
            "Results:"
        ]

        for result in self.results:
            status = "✓" if result.passed else "✗"
            lines.append(f"  {status} {result.name}: {result.message}")

        return "\n".join(lines)


class DataValidator:
    """
    Validation for a daily single-ticker price frame.

    Validates:
    - Required columns
    - Data types
    - Missing values
    - Strictly positive prices
    - One observation per calendar day, no gaps
    - Outliers in daily log returns (informational)
    """

    REQUIRED_COLUMNS = ['timestamp', 'price']

    def __init__(self, max_missing_pct: float = 0.0, z_threshold: float = 5.0):
        """
        Initialize validator.

        Args:
            max_missing_pct: Maximum allowed missing price percentage
            z_threshold: Z-score threshold for return outliers
        """
        self.max_missing_pct = max_missing_pct
        self.z_threshold = z_threshold

    def validate_schema(self, df: pd.DataFrame) -> ValidationResult:
        """Validate that the frame has the required columns."""
        missing = [col for col in self.REQUIRED_COLUMNS if col not in df.columns]

        if missing:
            return ValidationResult(
                name="schema",
                passed=False,
                message=f"Missing columns: {missing}",
                details={'missing_columns': missing}
            )

        return ValidationResult(
            name="schema",
            passed=True,
            message="All required columns present"
        )

    def validate_data_types(self, df: pd.DataFrame) -> ValidationResult:
        """Validate data types of columns."""
        issues = []

        if 'price' in df.columns and not pd.api.types.is_numeric_dtype(df['price']):
            issues.append("price is not numeric")

        if 'timestamp' in df.columns and not pd.api.types.is_datetime64_any_dtype(df['timestamp']):
            issues.append("timestamp is not datetime")

        if issues:
            return ValidationResult(
                name="data_types",
                passed=False,
                message=f"Type issues: {issues}",
                details={'issues': issues}
            )

        return ValidationResult(
            name="data_types",
            passed=True,
            message="All data types valid"
        )

    def validate_missing_values(self, df: pd.DataFrame) -> ValidationResult:
        """Check for missing prices."""
        if len(df) == 0:
            return ValidationResult(name="missing_values", passed=False, message="Empty frame")

        n_missing = int(df['price'].isnull().sum()) if 'price' in df.columns else 0
        missing_pct = n_missing / len(df) * 100

        if missing_pct > self.max_missing_pct:
            return ValidationResult(
                name="missing_values",
                passed=False,
                message=f"{n_missing} missing prices ({missing_pct:.2f}%)",
                details={'missing_count': n_missing}
            )

        return ValidationResult(
            name="missing_values",
            passed=True,
            message=f"Total missing values: {n_missing}"
        )

    def validate_value_ranges(self, df: pd.DataFrame) -> ValidationResult:
        """Validate that prices are strictly positive."""
        if 'price' not in df.columns:
            return ValidationResult(name="value_ranges", passed=False, message="No price column")

        non_positive = int((df['price'] <= 0).sum())

        if non_positive > 0:
            return ValidationResult(
                name="value_ranges",
                passed=False,
                message=f"price: {non_positive} non-positive values",
                details={'non_positive_count': non_positive}
            )

        return ValidationResult(
            name="value_ranges",
            passed=True,
            message="All values within expected ranges"
        )

    def validate_temporal_consistency(self, df: pd.DataFrame) -> ValidationResult:
        """Validate uniqueness and daily spacing of the observation dates."""
        if 'timestamp' not in df.columns:
            return ValidationResult(
                name="temporal_consistency",
                passed=False,
                message="No timestamp column found"
            )

        issues = []

        # Check duplicates
        duplicates = int(df['timestamp'].duplicated().sum())
        if duplicates > 0:
            issues.append(f"{duplicates} duplicate timestamps")

        # Check gaps
        if len(df) > 1:
            # Spacing is measured on sorted dates; row order is fixed by the loader
            time_diffs = df['timestamp'].sort_values().diff().dropna()
            gaps = time_diffs[time_diffs > timedelta(days=1)]

            if len(gaps) > 0:
                issues.append(f"{len(gaps)} gaps, largest {gaps.max().days} days")

        if issues:
            return ValidationResult(
                name="temporal_consistency",
                passed=False,
                message=f"Temporal issues: {issues}",
                details={'issues': issues}
            )

        return ValidationResult(
            name="temporal_consistency",
            passed=True,
            message="One observation per day, no gaps"
        )

    def validate_outliers(self, df: pd.DataFrame) -> ValidationResult:
        """
        Detect extreme daily log returns using z-score.

        Informational only: always passes.
        """
        prices = df['price'].where(df['price'] > 0)
        returns = np.log(prices).diff().dropna()

        if len(returns) < 2 or returns.std() == 0:
            return ValidationResult(name="outliers", passed=True, message="Too few returns to assess")

        z_scores = np.abs((returns - returns.mean()) / returns.std())
        outliers = int((z_scores > self.z_threshold).sum())

        if outliers > 0:
            return ValidationResult(
                name="outliers",
                passed=True,
                message=f"{outliers} daily returns with z>{self.z_threshold}",
                details={'outlier_count': outliers}
            )

        return ValidationResult(
            name="outliers",
            passed=True,
            message="No significant outliers detected"
        )

    def validate(self, df: pd.DataFrame) -> ValidationReport:
        """
        Run all validation checks.

        Args:
            df: Frame with `timestamp` and `price` columns

        Returns:
            ValidationReport with all results
        """
        logger.info("Running validation for price data...")

        report = ValidationReport(
            timestamp=datetime.now(),
            row_count=len(df),
            column_count=len(df.columns)
        )

        report.results.append(self.validate_schema(df))
        if not report.results[0].passed:
            logger.warning(f"  schema: {report.results[0].message}")
            return report

        validations = [
            ('data_types', self.validate_data_types),
            ('missing_values', self.validate_missing_values),
            ('value_ranges', self.validate_value_ranges),
            ('temporal_consistency', self.validate_temporal_consistency),
            ('outliers', self.validate_outliers)
        ]

        for name, validation_func in validations:
            result = validation_func(df)
            report.results.append(result)

            log_level = logging.INFO if result.passed else logging.WARNING
            logger.log(log_level, f"  {name}: {result.message}")

        status = "PASSED" if report.all_passed else "FAILED"
        logger.info(f"Validation {status} ({len([r for r in report.results if r.passed])}/{len(report.results)} checks)")

        return report
