"""HTML tag rendering per tracking channel.

Every renderer is a pure function of its arguments. Cache-buster and
recipient-id tokens stay literal in the output; platform transformers
substitute them when a tag is displayed or exported.
"""

from html import escape

from tracking_tags.core.schemas import TrackingChannel, TrackingCreativeInfo, TrackingTags, TrackingUrls


def _comment_text(value: str) -> str:
    # "--" terminates an HTML comment early
    return value.replace("--", "-")


def _text(value: str | None) -> str:
    return escape(value or "", quote=True)


def render_display_tag(
    creative: TrackingCreativeInfo,
    urls: TrackingUrls,
    advertiser_name: str,
    campaign_name: str,
    size: str,
) -> str:
    """Display ad snippet for website and streaming placements."""
    return f"""<!-- {_comment_text(advertiser_name)} | {_comment_text(campaign_name)} | {size} -->
<a href="{urls.click_tracker}" target="_blank" rel="noopener">
  <img src="{urls.creative_url}" width="{creative.width}" height="{creative.height}" border="0" alt="{_text(creative.alt_text)}" />
</a>
<img src="{urls.impression_pixel}" width="1" height="1" style="display:none;" alt="" />"""


def render_newsletter_image_tag(
    creative: TrackingCreativeInfo,
    urls: TrackingUrls,
    advertiser_name: str,
    campaign_name: str,
) -> str:
    """Table-based image ad for email clients (Outlook, Gmail, Yahoo, Apple Mail).

    Inline CSS only, explicit width/height, border="0", descriptive alt text
    and a "Sponsored" label.
    """
    alt_text = _text(creative.alt_text or f"{advertiser_name} - Click to learn more")

    return f"""<!-- {_comment_text(advertiser_name)} | {_comment_text(campaign_name)} | Newsletter Ad -->
<!-- Note: Click tracking is most reliable. Impressions may be inflated by Apple Mail Privacy Protection. -->
<table role="presentation" border="0" cellpadding="0" cellspacing="0" width="100%" style="margin:10px 0;">
  <tr>
    <td align="center">
      <table role="presentation" border="0" cellpadding="0" cellspacing="0">
        <tr>
          <td style="font-family:Arial,Helvetica,sans-serif;font-size:10px;color:#999999;padding-bottom:4px;">
            Sponsored
          </td>
        </tr>
        <tr>
          <td>
            <a href="{urls.click_tracker}" target="_blank" style="text-decoration:none;">
              <img src="{urls.creative_url}" width="{creative.width}" height="{creative.height}" alt="{alt_text}" title="{alt_text}" style="display:block;max-width:100%;height:auto;border:0;" border="0" />
            </a>
          </td>
        </tr>
      </table>
    </td>
  </tr>
</table>
<img src="{urls.impression_pixel}" width="1" height="1" alt="" style="display:none;width:1px;height:1px;border:0;" border="0" />"""


def render_newsletter_image_simplified_tag(
    urls: TrackingUrls,
    advertiser_name: str,
    campaign_name: str,
) -> str:
    """Bare URLs plus minimal HTML for ESPs with restricted HTML support."""
    return f"""<!-- {_comment_text(advertiser_name)} | {_comment_text(campaign_name)} | Simplified Version -->
<!-- Use these URLs in your ESP's native image/link blocks: -->
<!--
  LINK URL (wrap the image with this):
  {urls.click_tracker}

  IMAGE URL (the ad creative):
  {urls.creative_url}

  IMPRESSION PIXEL (add as 1x1 hidden image):
  {urls.impression_pixel}
-->

<!-- Or copy this minimal HTML if your ESP supports it: -->
<a href="{urls.click_tracker}"><img src="{urls.creative_url}" alt="{_text(advertiser_name)}" style="max-width:100%;border:0;" border="0" /></a>
<img src="{urls.impression_pixel}" width="1" height="1" alt="" style="display:none;" />"""


def render_newsletter_text_tag(
    creative: TrackingCreativeInfo,
    urls: TrackingUrls,
    advertiser_name: str,
    campaign_name: str,
) -> str:
    """Headline/body/CTA text ad; works with images disabled."""
    headline = _text(creative.headline or advertiser_name)
    body = _text(creative.body)
    cta_text = _text(creative.cta_text or "Learn More")

    body_row = ""
    if body:
        body_row = f"""
        <tr>
          <td style="font-family:Arial,Helvetica,sans-serif;font-size:14px;color:#555555;line-height:1.5;padding-bottom:12px;">
            {body}
          </td>
        </tr>"""

    return f"""<!-- {_comment_text(advertiser_name)} | {_comment_text(campaign_name)} | Newsletter Text Ad -->
<table role="presentation" border="0" cellpadding="0" cellspacing="0" width="100%" style="margin:15px 0;">
  <tr>
    <td style="background-color:#f5f5f5;padding:15px;border-radius:4px;">
      <table role="presentation" border="0" cellpadding="0" cellspacing="0" width="100%">
        <tr>
          <td style="font-family:Arial,Helvetica,sans-serif;font-size:10px;color:#999999;text-transform:uppercase;padding-bottom:8px;">
            Sponsored
          </td>
        </tr>
        <tr>
          <td style="font-family:Arial,Helvetica,sans-serif;font-size:18px;font-weight:bold;color:#333333;line-height:1.3;padding-bottom:8px;">
            <a href="{urls.click_tracker}" target="_blank" style="color:#333333;text-decoration:none;">{headline}</a>
          </td>
        </tr>{body_row}
        <tr>
          <td>
            <a href="{urls.click_tracker}" target="_blank" style="font-family:Arial,Helvetica,sans-serif;font-size:14px;font-weight:bold;color:#0066cc;text-decoration:none;">{cta_text} &rarr;</a>
          </td>
        </tr>
      </table>
    </td>
  </tr>
</table>
<img src="{urls.impression_pixel}" width="1" height="1" alt="" style="display:none;width:1px;height:1px;border:0;" border="0" />"""


def render_comment_line(
    advertiser_name: str, campaign_name: str, channel: TrackingChannel, publication_name: str
) -> str:
    parts = [advertiser_name, campaign_name, channel.value, publication_name]
    return f"<!-- {' | '.join(_comment_text(p) for p in parts)} -->"


def render_tags(
    channel: TrackingChannel,
    creative: TrackingCreativeInfo,
    urls: TrackingUrls,
    advertiser_name: str,
    campaign_name: str,
    publication_name: str,
) -> TrackingTags:
    """Render the full tag (and simplified tag for image newsletters) for a channel."""
    simplified_tag = None
    if channel == TrackingChannel.NEWSLETTER_TEXT:
        full_tag = render_newsletter_text_tag(creative, urls, advertiser_name, campaign_name)
    elif channel == TrackingChannel.NEWSLETTER_IMAGE:
        full_tag = render_newsletter_image_tag(creative, urls, advertiser_name, campaign_name)
        simplified_tag = render_newsletter_image_simplified_tag(urls, advertiser_name, campaign_name)
    else:
        size = f"{creative.width}x{creative.height}"
        full_tag = render_display_tag(creative, urls, advertiser_name, campaign_name, size)

    return TrackingTags(
        full_tag=full_tag,
        simplified_tag=simplified_tag,
        comments=render_comment_line(advertiser_name, campaign_name, channel, publication_name),
    )
