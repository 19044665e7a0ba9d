from abc import ABC, abstractmethod

from tracking_tags.core.schemas import TransformedTag

DEFAULT_CACHE_BUSTER_TOKEN = "CACHE_BUSTER"
DEFAULT_EMAIL_ID_TOKEN = "EMAIL_ID"


class PlatformTransformer(ABC):
    """Abstract base class for platform transformers.

    A transformer rewrites the literal macro tokens of a stored tag into the
    syntax of one ad server or email platform. Output is never persisted.
    """

    # Registry key and display name; subclasses override
    platform: str = ""
    platform_name: str = ""
    instructions: str = ""

    def __init__(
        self,
        cache_buster_token: str = DEFAULT_CACHE_BUSTER_TOKEN,
        email_id_token: str = DEFAULT_EMAIL_ID_TOKEN,
    ):
        self.cache_buster_token = cache_buster_token
        self.email_id_token = email_id_token

    @abstractmethod
    def transform(self, tag: str) -> str:
        """Return the tag rewritten for this platform."""
        pass

    def render(self, tag: str) -> TransformedTag:
        return TransformedTag(
            tag=self.transform(tag),
            platform=self.platform,
            platform_name=self.platform_name,
            instructions=self.instructions,
        )
