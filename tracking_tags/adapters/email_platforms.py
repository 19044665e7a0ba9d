"""Email platform (ESP) transformers for newsletter tags.

Newsletter tags carry two literal tokens: the recipient id and the cache
buster. Each ESP substitutes its own merge tags at send time.
"""

from dataclasses import dataclass

from tracking_tags.adapters.base import DEFAULT_CACHE_BUSTER_TOKEN, DEFAULT_EMAIL_ID_TOKEN, PlatformTransformer


@dataclass(frozen=True)
class MergeTags:
    name: str
    email_id: str
    cache_buster: str
    instructions: str


ESP_MERGE_TAGS: dict[str, MergeTags] = {
    "mailchimp": MergeTags(
        "Mailchimp",
        "*|UNIQID|*",
        "*|DATE:U|*",
        "Paste into a Code block in your Mailchimp campaign. Merge tags will be replaced when sent.",
    ),
    "constant_contact": MergeTags(
        "Constant Contact",
        "[[CONTACT_ID]]",
        "[[DATE]]",
        "Use the Custom Code block in Constant Contact to paste this tag.",
    ),
    "campaign_monitor": MergeTags(
        "Campaign Monitor",
        "[subscriberkey]",
        "[currentdatetimestamp]",
        "Paste into an HTML block in Campaign Monitor.",
    ),
    "klaviyo": MergeTags(
        "Klaviyo",
        "{{ person.id }}",
        '{{ now|date:"U" }}',
        "Use a Custom HTML block in Klaviyo. Django-style merge tags will be processed.",
    ),
    "sailthru": MergeTags(
        "Sailthru",
        "{extid}",
        '{date format="U"}',
        "Paste into your Sailthru template HTML.",
    ),
    "active_campaign": MergeTags(
        "ActiveCampaign",
        "%SUBSCRIBERID%",
        "%DATETIME%",
        "Use the HTML block in ActiveCampaign to add this tag.",
    ),
    "sendgrid": MergeTags(
        "SendGrid",
        "{{contact.id}}",
        "{{timestamp}}",
        "Paste into your SendGrid dynamic template or design editor.",
    ),
    "beehiiv": MergeTags(
        "Beehiiv",
        "{{subscriber_id}}",
        "{{timestamp}}",
        "Use the Custom HTML block in Beehiiv newsletter editor.",
    ),
    "convertkit": MergeTags(
        "ConvertKit",
        "{{ subscriber.id }}",
        '{{ "now" | date: "%s" }}',
        "Paste into a Custom HTML block in your ConvertKit broadcast.",
    ),
    "emma": MergeTags(
        "Emma",
        "[[member_id]]",
        "[[send_date]]",
        "Use the Code block in Emma's email editor.",
    ),
    "hubspot": MergeTags(
        "HubSpot",
        "{{contact.hs_object_id}}",
        "{{current_time}}",
        "Paste into a Custom Module or HTML block in HubSpot.",
    ),
    "brevo": MergeTags(
        "Brevo (Sendinblue)",
        "{{contact.ID}}",
        '{{today format="U"}}',
        "Use the HTML block in Brevo's email designer.",
    ),
    "mailer_lite": MergeTags(
        "MailerLite",
        "{$subscriber_id}",
        "{$timestamp}",
        "Paste into a Custom HTML block in MailerLite.",
    ),
    "drip": MergeTags(
        "Drip",
        "{{ subscriber.id }}",
        '{{ now | date: "%s" }}',
        "Use Liquid tags in your Drip email template.",
    ),
    "aweber": MergeTags(
        "AWeber",
        "{!subscriber_id}",
        "{!date_sent}",
        "Paste into your AWeber message using the HTML editor.",
    ),
    "other": MergeTags(
        "Other / Unknown",
        DEFAULT_EMAIL_ID_TOKEN,
        DEFAULT_CACHE_BUSTER_TOKEN,
        "Replace EMAIL_ID with your ESP's subscriber ID merge tag, and CACHE_BUSTER with a timestamp merge tag.",
    ),
}


class EmailPlatformTransformer(PlatformTransformer):
    """Merge-tag substitution for one ESP.

    Publications on an unlisted ESP ("other") can supply their own merge tags;
    custom tags override the table for any ESP.
    """

    def __init__(
        self,
        esp: str,
        custom_email_id: str | None = None,
        custom_cache_buster: str | None = None,
        cache_buster_token: str = DEFAULT_CACHE_BUSTER_TOKEN,
        email_id_token: str = DEFAULT_EMAIL_ID_TOKEN,
    ):
        super().__init__(cache_buster_token, email_id_token)
        merge_tags = ESP_MERGE_TAGS[esp]
        self.platform = esp
        self.platform_name = merge_tags.name
        self.instructions = merge_tags.instructions
        self.email_id_merge_tag = custom_email_id or merge_tags.email_id
        self.cache_buster_merge_tag = custom_cache_buster or merge_tags.cache_buster

    def transform(self, tag: str) -> str:
        transformed = tag.replace(self.email_id_token, self.email_id_merge_tag)
        return transformed.replace(self.cache_buster_token, self.cache_buster_merge_tag)
