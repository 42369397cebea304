"""
Pipeline orchestrator for the forecast comparison report.

Manages the complete workflow:
1. Data loading
2. Data validation
3. Train/test split
4. Model fitting and forecasting
5. Forecast combination
6. Evaluation and residual diagnostics
7. Report generation
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd
import numpy as np

from ..config import Config
from ..data import PriceLoader, DataValidator, split_series
from ..models import ModelBank, ForecastCombiner, build_forecaster
from ..evaluation import Evaluator, residual_diagnostics
from .report import ReportWriter

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Main pipeline orchestrator.

    Runs every stage once, in order, passing each stage's output to
    the next. Any failure is logged and re-raised.
    """

    def __init__(self, config: Optional[Config] = None, config_path: str = "config/config.yaml"):
        """
        Initialize pipeline.

        Args:
            config: Configuration object (or load from path)
            config_path: Path to config file
        """
        self.config = config or Config(config_path)

        # Initialize components
        self.loader = PriceLoader.from_config(self.config)
        self.validator = DataValidator()
        self.evaluator = Evaluator(seasonal_period=self.config.mase_seasonal_period)

        combiner_config = self.config.combiner_config
        self.combiner = ForecastCombiner(combiner_config.members) if combiner_config.enabled else None

        # Stage outputs
        self.frame: Optional[pd.DataFrame] = None
        self.series: Optional[pd.Series] = None
        self.validation = None
        self.split = None
        self.bank: Optional[ModelBank] = None
        self.results: Dict[str, Any] = {}
        self.accuracy = None
        self.diagnostics: Dict[str, Any] = {}

    def run(self) -> Dict[str, Any]:
        """
        Run complete pipeline.

        Returns:
            Dictionary with pipeline results
        """
        start_time = datetime.now()
        self.config.create_directories()

        logger.info("=" * 80)
        logger.info("ETH FORECAST COMPARISON")
        logger.info(f"Start time: {start_time}")
        logger.info(f"Models: {self.config.enabled_models}")
        logger.info("=" * 80)

        results = {
            'start_time': start_time,
            'models': self.config.enabled_models,
            'steps': {}
        }

        try:
            results['steps']['loading'] = self._run_loading()
            results['steps']['validation'] = self._run_validation()
            results['steps']['split'] = self._run_split()
            results['steps']['models'] = self._run_models()

            if self.combiner is not None:
                results['steps']['combination'] = self._run_combination()

            results['steps']['evaluation'] = self._run_evaluation()
            results['steps']['report'] = self._run_report()

            results['success'] = True
            results['best_model'] = self.accuracy.best_model
            results['accuracy'] = self.accuracy.ranked()

        except Exception as e:
            logger.error(f"Pipeline failed: {e}", exc_info=True)
            results['success'] = False
            results['error'] = str(e)
            self._finish(results, start_time)
            raise

        self._finish(results, start_time)

        return results

    def _finish(self, results: Dict, start_time: datetime) -> None:
        end_time = datetime.now()
        results['end_time'] = end_time
        results['duration_seconds'] = (end_time - start_time).total_seconds()
        self._print_summary(results)

    def _run_loading(self) -> Dict:
        """Run data loading step."""
        logger.info("\n" + "=" * 60)
        logger.info("STEP 1: DATA LOADING")
        logger.info("=" * 60)

        csv_path = self.config.data_config.csv_path
        self.frame = self.loader.read_frame(csv_path)
        self.series = self.loader.to_series(self.frame)

        logger.info(f"✓ Loaded {len(self.series)} daily log-prices from {csv_path}")

        return {'success': True, 'observations': len(self.series)}

    def _run_validation(self) -> Dict:
        """Run data validation step."""
        logger.info("\n" + "=" * 60)
        logger.info("STEP 2: DATA VALIDATION")
        logger.info("=" * 60)

        self.validation = self.validator.validate(self.frame)

        if not self.validation.critical_passed:
            failed = [r.name for r in self.validation.failures]
            if self.config.strict_validation:
                raise ValueError(f"Critical data validation failed: {failed}")
            logger.warning(f"✗ Validation issues (continuing): {failed}")
        else:
            logger.info("✓ Validation passed")

        return {
            'success': self.validation.critical_passed,
            'results': {r.name: r.passed for r in self.validation.results}
        }

    def _run_split(self) -> Dict:
        """Run train/test split step."""
        logger.info("\n" + "=" * 60)
        logger.info("STEP 3: TRAIN/TEST SPLIT")
        logger.info("=" * 60)

        self.split = split_series(self.series, self.config.split_config.train_end)

        logger.info(f"✓ {self.split}")

        return {
            'success': True,
            'train_size': len(self.split.train),
            'test_size': len(self.split.test),
            'horizon': self.split.horizon
        }

    def _run_models(self) -> Dict:
        """Fit every enabled model and forecast the test window."""
        logger.info("\n" + "=" * 60)
        logger.info("STEP 4: MODEL FITTING AND FORECASTING")
        logger.info("=" * 60)

        self.bank = ModelBank.from_config(self.config)
        self.bank.fit_all(self.split.train)
        self.results = self.bank.forecast_all(self.split)

        if self.config.save_models:
            self.bank.save_all(self.config.models_path)

        return {
            'success': True,
            'models': {name: dict(result.metadata) for name, result in self.results.items()}
        }

    def _run_combination(self) -> Dict:
        """Average the configured member forecasts."""
        logger.info("\n" + "=" * 60)
        logger.info("STEP 5: FORECAST COMBINATION")
        logger.info("=" * 60)

        combined = self.combiner.combine(self.results)
        self.results[combined.model_name] = combined

        logger.info(f"✓ {combined.model_name}: mean of {len(self.combiner.members)} forecasts")

        return {'success': True, 'members': list(self.combiner.members)}

    def _run_evaluation(self) -> Dict:
        """Score every forecast and test training residuals."""
        logger.info("\n" + "=" * 60)
        logger.info("STEP 6: EVALUATION")
        logger.info("=" * 60)

        self.accuracy = self.evaluator.evaluate_all(self.results, self.split)

        logger.info("Residual diagnostics (Ljung-Box):")
        self.diagnostics = residual_diagnostics(
            self.results, self.split.train,
            seasonal_period=self.config.ljung_box_period
        )

        ranked = self.accuracy.ranked()
        for name, row in ranked.iterrows():
            logger.info(f"  #{int(row['rank'])} {name}: RMSE={row['rmse']:.6f}")

        return {'success': True, 'best_model': self.accuracy.best_model}

    def _run_report(self) -> Dict:
        """Write tables, figures and the Markdown report."""
        logger.info("\n" + "=" * 60)
        logger.info("STEP 7: REPORT")
        logger.info("=" * 60)

        writer = ReportWriter(
            self.config.reports_path,
            figures_dir=self.config.visualizations_path,
            plots=self.config.plots_enabled,
            combination_name=self.combiner.name if self.combiner else 'combination'
        )
        written = writer.write(
            self.split, self.results, self.accuracy,
            diagnostics=self.diagnostics, validation=self.validation
        )

        logger.info(f"✓ Report written to {self.config.reports_path}")

        return {'success': True, 'files': {k: str(v) for k, v in written.items()}}

    def _print_summary(self, results: Dict) -> None:
        """Print execution summary."""
        logger.info("\n" + "=" * 80)
        logger.info("PIPELINE SUMMARY")
        logger.info("=" * 80)
        logger.info(f"Duration: {results['duration_seconds']:.1f} seconds")
        logger.info(f"Status: {'SUCCESS' if results['success'] else 'FAILED'}")

        for step_name, step_result in results.get('steps', {}).items():
            status = "✓" if step_result.get('success', False) else "✗"
            logger.info(f"  {status} {step_name}")

        if results.get('best_model'):
            logger.info(f"Best model: {results['best_model']}")

        logger.info("=" * 80)

    # Forward forecasting beyond the data
    def _load_series(self) -> pd.Series:
        if self.series is None:
            self.frame = self.loader.read_frame(self.config.data_config.csv_path)
            self.series = self.loader.to_series(self.frame)
        return self.series

    def _fit_full(self, name: str, series: pd.Series):
        forecaster = build_forecaster(name, self.config.model_params(name), self.config.random_seed)
        return forecaster.fit(series)

    def forecast_ahead(self, model_name: str, horizon: int) -> pd.DataFrame:
        """
        Refit one model on the full series and forecast beyond its last date.

        Args:
            model_name: Enabled model name, or the combination name
            horizon: Number of days ahead

        Returns:
            DataFrame with log-price and price columns on the future dates
        """
        series = self._load_series()

        logger.info(f"Forecasting {horizon} days beyond {series.index[-1].date()} with {model_name}")

        if self.combiner is not None and model_name == self.combiner.name:
            member_results = {
                member: self._fit_full(member, series).forecast(horizon)
                for member in self.combiner.members
            }
            result = self.combiner.combine(member_results)
        elif model_name in self.config.enabled_models:
            result = self._fit_full(model_name, series).forecast(horizon)
        else:
            raise KeyError(f"Model not enabled: {model_name}")

        frame = pd.DataFrame({'log_price': result.mean})
        frame['price'] = np.exp(result.mean)

        if result.has_intervals:
            frame['log_lower'] = result.lower
            frame['log_upper'] = result.upper
            frame['price_lower'] = np.exp(result.lower)
            frame['price_upper'] = np.exp(result.upper)

        frame.index.name = 'date'

        return frame

    # Convenience methods for individual steps
    def load(self) -> pd.Series:
        """Run only data loading."""
        self._run_loading()
        return self.series

    def validate(self):
        """Run loading and validation."""
        if self.frame is None:
            self._run_loading()
        self._run_validation()
        return self.validation

    @property
    def model_names(self) -> List[str]:
        names = list(self.config.enabled_models)
        if self.combiner is not None:
            names.append(self.combiner.name)
        return names
