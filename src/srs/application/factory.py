"""
Scheduler / Service Factory
Centralizes wiring of the core from a resolved configuration.
"""

from srs.application.card_repository import CardRepository
from srs.application.config import AppConfig
from srs.domain.ports import Scheduler
from srs.infrastructure.adapters.fsrs_scheduler import FsrsScheduler


def get_scheduler(config: AppConfig) -> Scheduler:
    """
    Returns the scheduling algorithm configured for this run.
    """
    return FsrsScheduler(
        desired_retention=config.desired_retention,
        maximum_interval=config.maximum_interval,
        enable_fuzzing=config.enable_fuzzing,
    )


def get_deck_service(config: AppConfig):
    """
    Returns a DeckService wired with the default repository and scheduler.
    """
    from srs.application.deck_service import DeckService

    return DeckService(config, repository=CardRepository(), scheduler=get_scheduler(config))
