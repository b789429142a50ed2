"""
Scratcher EV
============

Scrapes state lottery scratcher pages, computes expected value per game
and mines daily snapshots for EV growth, sales velocity and prize depletion.
"""

from scratcher_ev.errors import EmptyBatchFailure, ExtractionFailure, FetchFailure, ScratcherError
from scratcher_ev.models import Game, GameWithEV, PrizeTier, Snapshot
from scratcher_ev.extract import extract_game
from scratcher_ev.ev import calculate_ev, calculate_ev_for_games
from scratcher_ev.trends import TrendConfig, analyze

__version__ = "0.1.0"

__all__ = [
    "EmptyBatchFailure", "ExtractionFailure", "FetchFailure", "ScratcherError",
    "Game", "GameWithEV", "PrizeTier", "Snapshot",
    "extract_game", "calculate_ev", "calculate_ev_for_games",
    "TrendConfig", "analyze",
]
