# Error kinds shared across the bot.
#  - Startup errors (ConfigError, AuthError) are fatal: the process must not start.
#  - Per-unit errors (GenerationError, DeliveryError) are contained to the one
#    request/response they belong to and never stop a worker or dispatcher.


class StoryBotError(Exception):
    pass


class ConfigError(StoryBotError):
    """Configuration is missing or invalid."""


class AuthError(StoryBotError):
    """The chat platform rejected the bot token."""


class GenerationError(StoryBotError):
    """A single call to the generation backend failed.

    The underlying exception, when there is one, is chained as ``__cause__``.
    """


class DeliveryError(StoryBotError):
    """Sending one reply to the chat platform failed."""


class PipelineClosed(StoryBotError):
    """The pipeline no longer accepts new work."""
