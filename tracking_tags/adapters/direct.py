"""Direct placement (no ad server): a JavaScript wrapper around the display tag.

The wrapper skips known crawlers and renders (and fires the impression pixel)
only once the slot scrolls into view.
"""

import hashlib
import re

from tracking_tags.adapters.base import PlatformTransformer

_HREF = re.compile(r'href="([^"]+)"')
_IMG_SRC = re.compile(r'img src="([^"]+)"')
_PIXEL = re.compile(r'<img src="(https?://[^"]+)"[^>]*width="1"[^>]*height="1"')
_ALT = re.compile(r'alt="([^"]*)"')
_SIZE = re.compile(r'width="(\d+)" height="(\d+)"')

_RUNTIME_TIMESTAMP = "'+Date.now()+'"


class DirectTransformer(PlatformTransformer):
    platform = "direct"
    platform_name = "Direct / No Ad Server"
    instructions = (
        "Paste this tag directly into your CMS or website HTML. Includes bot protection and lazy loading."
    )

    def container_id(self, tag: str) -> str:
        return "ad-container-" + hashlib.sha1(tag.encode("utf-8")).hexdigest()[:12]

    def transform(self, tag: str) -> str:
        click = _HREF.search(tag)
        image = _IMG_SRC.search(tag)
        pixel = _PIXEL.search(tag)
        alt = _ALT.search(tag)
        size = _SIZE.search(tag)

        click_url = click.group(1) if click else ""
        image_url = image.group(1) if image else ""
        alt_text = (alt.group(1) if alt else "") or "Advertisement"
        width, height = (size.group(1), size.group(2)) if size else ("300", "250")

        runtime_click = click_url.replace(self.cache_buster_token, _RUNTIME_TIMESTAMP)
        runtime_pixel = pixel.group(1).replace(self.cache_buster_token, _RUNTIME_TIMESTAMP) if pixel else ""
        noscript_click = click_url.replace(self.cache_buster_token, "0") or "#"

        return f"""<!-- Direct Ad Tag with Bot Protection -->
<div id="{self.container_id(tag)}" style="width:{width}px;height:{height}px;">
  <noscript>
    <a href="{noscript_click}"><img src="{image_url}" width="{width}" height="{height}" alt="{alt_text}" /></a>
  </noscript>
</div>
<script>
(function() {{
  var isBot = /bot|crawl|spider|slurp|bingpreview|facebookexternalhit/i.test(navigator.userAgent);
  if (isBot) return;

  var container = document.currentScript.previousElementSibling;
  var fired = false;

  function renderAd() {{
    if (fired) return;
    fired = true;
    container.innerHTML = '<a href="{runtime_click}" target="_blank" rel="noopener">' +
      '<img src="{image_url}" width="{width}" height="{height}" alt="{alt_text}" style="border:0;" />' +
      '</a>' +
      '<img src="{runtime_pixel}" width="1" height="1" style="display:none;" alt="" />';
  }}

  if ('IntersectionObserver' in window) {{
    var observer = new IntersectionObserver(function(entries) {{
      if (entries[0].isIntersecting) {{
        observer.disconnect();
        renderAd();
      }}
    }}, {{ threshold: 0.1 }});
    observer.observe(container);
  }} else {{
    renderAd();
  }}
}})();
</script>"""
