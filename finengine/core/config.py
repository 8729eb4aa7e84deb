import os
from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional, Dict, Any, Callable, Iterable

load_dotenv()


class EnvConfig:
    """Environment lookups with optional fallback names and type casting.

    EnvConfig.get('FINENGINE_MAX_WORKERS', cast=int, aliases=['MAX_WORKERS'])
    """

    @staticmethod
    def get(name: str, default: Any = None, cast: Optional[Callable] = None, aliases: Optional[Iterable[str]] = None):
        for env_name in [name, *(aliases or ())]:
            raw = os.getenv(env_name)
            if raw is None:
                continue
            if cast is None:
                return raw
            try:
                return cast(raw)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid value for {env_name}: {exc}")
        return default


# Representative interpretations that flag a category for attention
PRIORITY_INTERPRETATIONS = ('poor', 'concerning')

# Benchmark performance that produces an action item
ACTION_PERFORMANCE = 'below_average'

DEBUG = EnvConfig.get('DEBUG', default='false', cast=lambda v: v.strip().lower() in ('1', 'true', 'yes'))


@dataclass
class BaseConfig:
    """Shared env access for the config dataclasses."""

    @classmethod
    def _env(cls, name: str, default: Any = None, cast: Optional[Callable] = None, aliases: Optional[list] = None):
        return EnvConfig.get(name, default=default, cast=cast, aliases=aliases)

    def validate(self, required: bool = True):
        """Subclasses raise ValueError for settings the engine cannot run with."""
        return None


@dataclass
class CalculationConfig(BaseConfig):
    """Defaults used by risk models when a record leaves them out."""
    var_confidence_level: float = 0.95
    monte_carlo_simulations: int = 10000
    monte_carlo_seed: int = 42

    def __post_init__(self):
        # Only consult env vars when the dataclass default is in use
        if self.var_confidence_level == CalculationConfig.var_confidence_level:
            self.var_confidence_level = self._env('FINENGINE_VAR_CONFIDENCE', default=self.var_confidence_level, cast=float)
        if self.monte_carlo_simulations == CalculationConfig.monte_carlo_simulations:
            self.monte_carlo_simulations = self._env('FINENGINE_MC_SIMULATIONS', default=self.monte_carlo_simulations, cast=int)
        if self.monte_carlo_seed == CalculationConfig.monte_carlo_seed:
            self.monte_carlo_seed = self._env('FINENGINE_MC_SEED', default=self.monte_carlo_seed, cast=int)

    def validate(self, required: bool = True) -> None:
        if not 0 < self.var_confidence_level < 1:
            raise ValueError('var_confidence_level must be between 0 and 1')
        if self.monte_carlo_simulations < 100:
            raise ValueError('monte_carlo_simulations must be >= 100')


@dataclass
class PipelineConfig(BaseConfig):
    max_workers: int = 4
    benchmark_upper_ratio: float = 1.1
    benchmark_lower_ratio: float = 0.9
    default_language: str = 'en'
    default_country: str = 'SAU'

    def __post_init__(self):
        workers = self._env('FINENGINE_MAX_WORKERS', default=None, cast=int, aliases=['MAX_WORKERS'])
        if workers is not None:
            self.max_workers = workers
        upper = self._env('FINENGINE_BENCHMARK_UPPER', default=None, cast=float)
        if upper is not None:
            self.benchmark_upper_ratio = upper
        lower = self._env('FINENGINE_BENCHMARK_LOWER', default=None, cast=float)
        if lower is not None:
            self.benchmark_lower_ratio = lower
        self.default_language = self._env('FINENGINE_LANGUAGE', default=self.default_language)
        self.default_country = self._env('FINENGINE_COUNTRY', default=self.default_country)

    def validate(self, required: bool = True) -> None:
        if self.max_workers < 1:
            raise ValueError('max_workers must be >= 1')
        if self.benchmark_lower_ratio >= self.benchmark_upper_ratio:
            raise ValueError('benchmark_lower_ratio must be below benchmark_upper_ratio')
        valid_languages = ['en', 'ar']
        if self.default_language not in valid_languages:
            raise ValueError(f'default_language must be one of {valid_languages}')


class AppConfig:
    """Holds the engine's sub-configs as class attributes.

    Read ``AppConfig.calculation`` / ``AppConfig.pipeline`` directly, or call
    ``AppConfig.from_env()`` for an instance whose sub-configs are re-read
    from the environment and validated.
    """

    calculation: CalculationConfig = CalculationConfig()
    pipeline: PipelineConfig = PipelineConfig()

    @staticmethod
    def validate_all(strict: bool = False) -> None:
        AppConfig.calculation.validate(required=strict)
        AppConfig.pipeline.validate(required=strict)

    @staticmethod
    def check_availability() -> Dict[str, Dict[str, Any]]:
        """Validate freshly built sub-configs.

        Returns {name: {'available': bool, 'reason': str or None}}.
        """
        availability: Dict[str, Dict[str, Any]] = {}
        for name, factory in (('calculation', CalculationConfig), ('pipeline', PipelineConfig)):
            try:
                factory().validate(required=True)
            except ValueError as e:
                availability[name] = {'available': False, 'reason': str(e)}
            else:
                availability[name] = {'available': True, 'reason': None}
        return availability

    @staticmethod
    def from_env(strict: bool = False) -> 'AppConfig':
        config = AppConfig()
        config.calculation = CalculationConfig()
        config.pipeline = PipelineConfig()
        config.calculation.validate(required=strict)
        config.pipeline.validate(required=strict)
        return config
