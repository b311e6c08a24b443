from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

import numpy as np

from .context_factors import (
    DEFAULT_VOLATILITY,
    ContextFactors,
    base_seasonal_factor,
    cycle_factor,
    fundamental_factors,
    onchain_factor,
    sentiment_factor,
    target_modifiers,
    volatility_adjustment,
    volatility_ratios,
)
from .fundamentals import calculate_fundamentals
from .numeric import advance_distribution, normalize_rows, sample_categorical
from .settings import settings
from .simulation import generate_state_paths, states_to_price_paths, summarize_paths
from .states import (
    STATE_INDEX,
    classify_states,
    count_transitions,
    monthly_statistics,
    state_indices,
)
from .types import (
    CRASH,
    PUMP,
    STATES,
    ForecastContext,
    ForecastResult,
    MonthlyStats,
    PricePoint,
    SimulationStep,
)

logger = logging.getLogger(__name__)

N_STATES = len(STATES)
DEFAULT_STATE_RETURNS = (-0.1, 0.002, 0.1)
DEFAULT_STATE_VOLATILITY = (0.05, 0.02, 0.05)
MIN_CONCENTRATION = 0.01
MAX_SIMULATION_PATHS = 10_000


class BayesianMarkovModel:
    """Three-state (crash / normal / pump) Markov chain with Dirichlet transition rows.

    ``prior`` is a fixed symmetric Dirichlet(1). ``adjusted_prior`` is the
    prior rescaled by the forecast context and ``posterior`` adds the observed
    transition counts on top of it.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        max_simulation_paths: int | None = None,
        crash_percentile: float | None = None,
        pump_percentile: float | None = None,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(settings.random_seed)
        self.max_simulation_paths = (
            settings.max_simulation_paths if max_simulation_paths is None else max_simulation_paths
        )
        self.crash_percentile = crash_percentile
        self.pump_percentile = pump_percentile

        self.prior = np.ones((N_STATES, N_STATES))
        self.adjusted_prior = self.prior.copy()
        self.posterior = self.prior.copy()
        self.transition_counts = np.zeros((N_STATES, N_STATES))

        self.steady_state_probs = np.full(N_STATES, 1.0 / N_STATES)
        self.current_state_dist = np.full(N_STATES, 1.0 / N_STATES)
        self.state_returns = np.array(DEFAULT_STATE_RETURNS, dtype=float)
        self.state_volatility = np.array(DEFAULT_STATE_VOLATILITY, dtype=float)

        self.monthly_stats: dict[int, MonthlyStats] = {}
        self.history: list[PricePoint] = []
        self.last_factors: ContextFactors | None = None

    @property
    def as_of(self) -> date:
        return self.history[-1].date if self.history else date.today()

    @property
    def current_month(self) -> int:
        return self.as_of.month

    def reset(self) -> BayesianMarkovModel:
        """Drop everything learned from a previous history."""
        self.adjusted_prior = self.prior.copy()
        self.transition_counts = np.zeros((N_STATES, N_STATES))
        self.posterior = self.prior.copy()
        self.steady_state_probs = np.full(N_STATES, 1.0 / N_STATES)
        self.current_state_dist = np.full(N_STATES, 1.0 / N_STATES)
        self.state_returns = np.array(DEFAULT_STATE_RETURNS, dtype=float)
        self.state_volatility = np.array(DEFAULT_STATE_VOLATILITY, dtype=float)
        self.monthly_stats = {}
        self.history = []
        self.last_factors = None
        return self

    def train(self, history: Sequence[PricePoint]) -> BayesianMarkovModel:
        self.reset()
        classified = classify_states(history, self.crash_percentile, self.pump_percentile)
        if not classified:
            logger.warning("Training skipped: empty price history")
            return self

        self.history = classified
        self.steady_state_probs, self.monthly_stats = monthly_statistics(classified)

        states = state_indices(classified)
        self.transition_counts = count_transitions(states)

        returns = np.array([p.log_return for p in classified], dtype=float)
        for i in range(N_STATES):
            in_state = returns[(states == i) & np.isfinite(returns)]
            if in_state.size:
                self.state_returns[i] = in_state.mean()
                self.state_volatility[i] = in_state.std()

        self.set_current_state(int(states[-1]))
        self.update_posterior()
        logger.info(
            "Trained on %d days: transitions=%s steady_state=%s",
            len(classified),
            self.transition_counts.astype(int).tolist(),
            np.round(self.steady_state_probs, 4).tolist(),
        )
        return self

    def context_factors(self, context: ForecastContext | None = None) -> ContextFactors:
        context = context or ForecastContext()
        month = context.current_month or self.current_month
        month_stats = self.monthly_stats.get(month)
        cycle_position = 0.5 if context.cycle_position is None else context.cycle_position
        sentiment_value = 50.0 if context.sentiment_value is None else context.sentiment_value

        if context.volatility is not None:
            metrics = context.volatility
            historical = metrics.historical or DEFAULT_VOLATILITY
            short_ratio, month_ratio = volatility_ratios(
                metrics.recent_30_day or DEFAULT_VOLATILITY,
                metrics.for_month(month) or DEFAULT_VOLATILITY,
                historical,
            )
        elif context.volatility_ratio is not None:
            short_ratio, month_ratio = context.volatility_ratio, 1.0
        else:
            short_ratio, month_ratio = 1.0, 1.0

        fundamentals = context.fundamentals or calculate_fundamentals(self.history, self.as_of)
        fundamentals_factors = fundamental_factors(fundamentals)

        factors = ContextFactors(
            seasonal=base_seasonal_factor(month_stats),
            volatility=volatility_adjustment(short_ratio, month_ratio),
            on_chain=onchain_factor(context.on_chain),
            sentiment=sentiment_factor(
                sentiment_value,
                month,
                month_stats.mean_return if month_stats is not None else None,
            ),
            cycle=cycle_factor(
                month,
                cycle_position,
                month_stats.frequencies["crash"] if month_stats is not None else None,
                fundamentals_factors.halving_phase,
            ),
            fundamentals=fundamentals_factors,
        )
        logger.debug("Context factors for month %d: %s", month, factors)
        return factors

    def adjust_prior(self, context: ForecastContext | None = None) -> np.ndarray:
        factors = self.context_factors(context)
        modifiers = np.array(target_modifiers(factors))
        self.adjusted_prior = np.maximum(MIN_CONCENTRATION, self.prior * modifiers)
        self.last_factors = factors
        logger.debug("Target modifiers crash=%.3f normal=%.3f pump=%.3f", *modifiers)
        return self.adjusted_prior.copy()

    def update_posterior(self) -> BayesianMarkovModel:
        self.posterior = self.adjusted_prior + self.transition_counts
        return self

    def get_transition_matrix(self, concentration: np.ndarray | None = None) -> np.ndarray:
        return normalize_rows(self.posterior if concentration is None else concentration)

    def set_current_state(self, state: int) -> BayesianMarkovModel:
        if 0 <= state < N_STATES:
            self.current_state_dist = np.zeros(N_STATES)
            self.current_state_dist[state] = 1.0
        else:
            logger.warning("Invalid state index %r; using steady-state distribution", state)
            self.current_state_dist = np.array(self.steady_state_probs, dtype=float)
        return self

    def set_current_state_dist(self, distribution: Sequence[float] | np.ndarray) -> BayesianMarkovModel:
        dist = np.asarray(distribution, dtype=float)
        if dist.shape != (N_STATES,) or not np.all(np.isfinite(dist)) or np.any(dist < 0) or dist.sum() <= 0:
            logger.warning("Ignoring invalid state distribution %r", distribution)
            return self
        self.current_state_dist = dist / dist.sum()
        return self

    def forecast_state_distribution(self, steps: int, matrix: np.ndarray | None = None) -> list[np.ndarray]:
        """Current distribution followed by the distribution after each of ``steps`` transitions."""
        matrix = self.get_transition_matrix() if matrix is None else matrix
        return advance_distribution(self.current_state_dist, matrix, steps)

    def calculate_expected_returns(self, steps: int, matrix: np.ndarray | None = None) -> list[float]:
        return [float(d @ self.state_returns) for d in self.forecast_state_distribution(steps, matrix)]

    def calculate_cumulative_state_probability(
        self, steps: int, target_state: int, matrix: np.ndarray | None = None
    ) -> float:
        """Probability of visiting ``target_state`` at least once within ``steps`` transitions."""
        if not 0 <= target_state < N_STATES:
            logger.error("Invalid target state: %r", target_state)
            return 0.0

        absorbing = np.array(self.get_transition_matrix() if matrix is None else matrix, dtype=float)
        absorbing[target_state] = 0.0
        absorbing[target_state, target_state] = 1.0
        return float(self.forecast_state_distribution(steps, absorbing)[-1][target_state])

    def sample_from_distribution(self, probabilities: Sequence[float] | np.ndarray) -> int:
        return sample_categorical(np.asarray(probabilities, dtype=float), self.rng.random())

    def generate_state_paths(
        self, steps: int, num_paths: int = 1000, matrix: np.ndarray | None = None
    ) -> np.ndarray:
        matrix = self.get_transition_matrix() if matrix is None else matrix
        num_paths = max(1, min(num_paths, self.max_simulation_paths, MAX_SIMULATION_PATHS))
        return generate_state_paths(self.current_state_dist, matrix, steps, num_paths, self.rng)

    def states_to_price_paths(
        self, state_paths: np.ndarray, current_price: float, add_randomness: bool = True
    ) -> np.ndarray:
        return states_to_price_paths(
            state_paths,
            current_price,
            self.state_returns,
            self.state_volatility,
            self.rng if add_randomness else None,
        )

    def simulate_price_paths(
        self, steps: int, current_price: float, num_paths: int = 1000, matrix: np.ndarray | None = None
    ) -> tuple[np.ndarray, list[SimulationStep]]:
        state_paths = self.generate_state_paths(steps, num_paths, matrix)
        price_paths = self.states_to_price_paths(state_paths, current_price)
        return price_paths, summarize_paths(price_paths)

    def generate_forecast(
        self, days: int, current_price: float, context: ForecastContext | None = None
    ) -> ForecastResult | None:
        if days < 0:
            logger.error("Forecast horizon must be non-negative, got %r", days)
            return None
        if not current_price > 0:
            logger.error("Current price must be positive, got %r", current_price)
            return None

        self.adjust_prior(context)
        self.update_posterior()
        matrix = self.get_transition_matrix()

        daily_returns = self.calculate_expected_returns(days, matrix)[1:]
        cumulative_return = float(sum(daily_returns))
        forecast_price = current_price * float(np.exp(cumulative_return))

        crash_probability = self.calculate_cumulative_state_probability(days, CRASH, matrix)
        pump_probability = self.calculate_cumulative_state_probability(days, PUMP, matrix)

        price_paths, summary = self.simulate_price_paths(
            days, current_price, settings.forecast_simulation_paths, matrix
        )
        lower_bound = summary[-1].lower5
        upper_bound = summary[-1].upper95

        logger.info(
            "%d-day forecast from %.2f: %.2f [%.2f, %.2f] crash=%.3f pump=%.3f",
            days,
            current_price,
            forecast_price,
            lower_bound,
            upper_bound,
            crash_probability,
            pump_probability,
        )
        return ForecastResult(
            current_price=current_price,
            forecast_price=forecast_price,
            lower_bound=lower_bound,
            upper_bound=upper_bound,
            expected_return=cumulative_return,
            crash_probability=crash_probability,
            pump_probability=pump_probability,
            transition_matrix=matrix,
            steady_state_probs=np.array(self.steady_state_probs, dtype=float),
            simulation_summary=summary,
            forecast_paths=price_paths[: settings.forecast_path_sample].copy(),
            timeframe_days=days,
            daily_returns=daily_returns,
            expected_daily_return=cumulative_return / days if days else 0.0,
            volatility=(upper_bound - lower_bound) / (2 * 1.96 * forecast_price),
            state_returns={name: float(self.state_returns[i]) for name, i in STATE_INDEX.items()},
            state_volatility={name: float(self.state_volatility[i]) for name, i in STATE_INDEX.items()},
            current_state_dist=self.current_state_dist.copy(),
        )
