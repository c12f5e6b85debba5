from src.app.repositories.challenge_repository import IChallengeRepository


class IOneTimeCodeRepository(IChallengeRepository):
    """OneTimeCode repository interface - application layer"""
