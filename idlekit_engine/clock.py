"""Simulation clock - drives a tickable game without wall-clock sleeping.

Anything with a ``tick()`` method can be driven: the GameEngine, or a
ClickerGame through its fixed-step adapter. Time is simulated, so a
thousand ticks run as fast as the host allows and a run is reproducible.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from idlekit_core.utils.logging import get_logger

logger = get_logger("engine.clock")


class Tickable(Protocol):
    def tick(self) -> None: ...


class SimulationClock:
    """Fixed-step loop over a Tickable.
    
    Usage:
        clock = SimulationClock(engine)
        clock.run(max_ticks=600, stop_condition=lambda game: game.view.points >= 1000)
    """
    
    def __init__(self, game: Tickable, tick_seconds: Optional[float] = None):
        """Initialize clock.
        
        Args:
            game: Object advanced by ``tick()``
            tick_seconds: Simulated seconds per tick, for ``elapsed_seconds``;
                taken from ``game.tick_seconds`` when omitted
        """
        self.game = game
        self.tick_seconds = tick_seconds if tick_seconds is not None else getattr(game, "tick_seconds", 0.1)
        self.ticks: int = 0
        self.is_running: bool = False
        self.is_paused: bool = False
    
    @property
    def elapsed_seconds(self) -> float:
        return self.ticks * self.tick_seconds
    
    def step(self) -> bool:
        """Advance one tick unless paused.
        
        Returns:
            True if a tick ran
        """
        if self.is_paused:
            return False
        self.game.tick()
        self.ticks += 1
        return True
    
    def advance(self, ticks: int) -> int:
        """Run ``ticks`` ticks; returns how many actually ran."""
        ran = 0
        for _ in range(max(0, ticks)):
            if not self.step():
                break
            ran += 1
        return ran
    
    def run(self, max_ticks: int = 100, stop_condition: Optional[Callable[[Tickable], bool]] = None) -> int:
        """Run until ``max_ticks`` ticks, a stop, a pause or the stop condition.
        
        Args:
            max_ticks: Maximum number of ticks this call executes
            stop_condition: Optional callable that returns True when the run should stop
            
        Returns:
            Number of ticks executed by this call
        """
        self.is_running = True
        ran = 0
        logger.debug(f"Running for up to {max_ticks} ticks")
        
        try:
            while self.is_running and ran < max_ticks:
                if self.is_paused:
                    logger.debug(f"Paused at tick {self.ticks}")
                    break
                
                if stop_condition and stop_condition(self.game):
                    logger.info(f"Stop condition met at tick {self.ticks}")
                    break
                
                self.step()
                ran += 1
        finally:
            self.is_running = False
        
        logger.debug(f"Run ended at tick {self.ticks}")
        return ran
    
    def pause(self) -> None:
        self.is_paused = True
    
    def resume(self) -> None:
        self.is_paused = False
    
    def stop(self) -> None:
        """Stop a running loop after the current tick."""
        self.is_running = False
