"""Ad server transformers for website and streaming tags.

Each ad server gets a cache-buster macro in place of the literal token and a
click macro prefixed onto the click tracker so the ad server counts the click
before redirecting through ours.
"""

import re

from tracking_tags.adapters.base import DEFAULT_CACHE_BUSTER_TOKEN, DEFAULT_EMAIL_ID_TOKEN, PlatformTransformer


class MacroAdServerTransformer(PlatformTransformer):
    """Ad server whose dialect is a pair of macros."""

    click_macro: str = ""
    cache_buster_macro: str = ""

    def __init__(
        self,
        cache_buster_token: str = DEFAULT_CACHE_BUSTER_TOKEN,
        email_id_token: str = DEFAULT_EMAIL_ID_TOKEN,
        click_path: str = "/c",
    ):
        super().__init__(cache_buster_token, email_id_token)
        # Only hrefs pointing at the click tracker get the click macro
        self._click_href = re.compile(r'href="(https?://[^"]*' + re.escape(click_path) + r'\?[^"]*)"')

    def transform(self, tag: str) -> str:
        transformed = tag.replace(self.cache_buster_token, self.cache_buster_macro)
        if self.click_macro:
            transformed = self._click_href.sub(lambda m: f'href="{self.click_macro}{m.group(1)}"', transformed)
        return transformed


class GoogleAdManagerTransformer(MacroAdServerTransformer):
    platform = "gam"
    platform_name = "Google Ad Manager (DFP)"
    click_macro = "%%CLICK_URL_UNESC%%"
    cache_buster_macro = "%%CACHEBUSTER%%"
    instructions = (
        "Paste this tag into a Third-Party Creative in GAM. "
        "The click macro will automatically track clicks through DFP."
    )


class BroadstreetTransformer(MacroAdServerTransformer):
    platform = "broadstreet"
    platform_name = "Broadstreet"
    click_macro = "{{click}}"
    cache_buster_macro = "[timestamp]"
    instructions = "Paste this tag into a Custom HTML ad in Broadstreet. Click tracking is handled automatically."


class AdButlerTransformer(MacroAdServerTransformer):
    platform = "adbutler"
    platform_name = "AdButler"
    click_macro = "[TRACKING_LINK]"
    cache_buster_macro = "[RANDOM]"
    instructions = "Paste this tag into a Custom HTML banner in AdButler. [TRACKING_LINK] records the click first."
