"""Bunco game configuration — scoring values, rules, timing, and roll overrides.

All values are plain frozen dataclasses so a configuration can be swapped
with dataclasses.replace() without touching module globals. No pygame or
frontend dependency.
"""
from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class ScoringConfig:
    """Points awarded per outcome."""
    bunco: int = 21        # three dice showing the round target
    baby_bunco: int = 5    # three of any other face
    match: int = 1         # per die matching the round target


@dataclass(frozen=True)
class RulesConfig:
    """Round and game structure."""
    rounds: int = 6                # round number wraps to 1 after this
    win_score: int = 21            # score that ends a round
    rounds_to_win_game: int = 4    # round wins a team needs to take the game


def _default_display_durations():
    return {"bunco": 4.0, "baby-bunco": 3.0}


@dataclass(frozen=True)
class TimingConfig:
    """Delays in seconds, injected by the presentation layer.

    None of these affect scoring or turn order — they only pace the game so
    animations and sounds have time to play out.
    """
    human_timer: int = 10             # countdown ticks for a human turn
    tick_interval: float = 1.0        # seconds per countdown tick
    low_time_threshold: int = 3       # ticks below this fire on_tick
    auto_roll_delay: float = 0.1      # after time-up, before the forced roll
    roll_duration: float = 0.75       # dice in the air
    turn_start_delay: float = 0.5     # before a new turn kicks off
    timer_restart_lead: float = 1.0   # countdown resumes this long before a match leaves the screen
    default_display: float = 2.0      # result shown before advancing
    display_durations: Dict[str, float] = field(default_factory=_default_display_durations)

    def display_duration(self, kind):
        """Seconds a result of this ScoreKind stays on screen."""
        return self.display_durations.get(kind.value, self.default_display)

    def timer_restart_delay(self, kind):
        """Seconds after a human's match before their countdown starts again."""
        return max(0.0, self.display_duration(kind) - self.timer_restart_lead)


@dataclass(frozen=True)
class ProbabilityConfig:
    """Chance that a roll is forced to a Bunco / Baby Bunco.

    Exists only to tune pacing for demos; scoring never looks at it.
    """
    bunco: float = 0.0
    baby_bunco: float = 0.0

    def __post_init__(self):
        for name in ("bunco", "baby_bunco"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} probability must be within [0, 1], got {value}")
        if self.bunco + self.baby_bunco > 1.0:
            raise ValueError("bunco + baby_bunco probabilities must not exceed 1")


PROBABILITY_PRESETS = {
    "realistic":          ProbabilityConfig(bunco=0.046, baby_bunco=0.028),
    "default":            ProbabilityConfig(bunco=0.1, baby_bunco=0.1),
    "high_action":        ProbabilityConfig(bunco=0.2, baby_bunco=0.2),
    "demo":               ProbabilityConfig(bunco=0.4, baby_bunco=0.3),
    "bunco_testing":      ProbabilityConfig(bunco=1.0, baby_bunco=0.0),
    "baby_bunco_testing": ProbabilityConfig(bunco=0.0, baby_bunco=1.0),
    "no_specials":        ProbabilityConfig(bunco=0.0, baby_bunco=0.0),
}
PRESET_NAMES = list(PROBABILITY_PRESETS)


def get_preset(name):
    """Look up a probability preset by name. Raises ValueError if unknown."""
    try:
        return PROBABILITY_PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown probability preset: {name!r}") from None


def preset_name_for(probabilities):
    """Return the preset name matching these probabilities, or None."""
    for name, preset in PROBABILITY_PRESETS.items():
        if preset == probabilities:
            return name
    return None


@dataclass(frozen=True)
class BuncoConfig:
    """Complete configuration consumed by the engine and coordinator."""
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    probabilities: ProbabilityConfig = field(default_factory=ProbabilityConfig)


DEFAULT_CONFIG = BuncoConfig()
