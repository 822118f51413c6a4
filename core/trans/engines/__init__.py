"""Translation provider implementations.

Importing this package registers every concrete ``TransInterface`` subclass:

- GoogleCloudTranslation (``google_cloud``): Google Cloud Translation v2.
- AzureTranslation (``azure``): Azure AI Translator, regional resource.
- DeeplTranslation (``deepl``): DeepL API.
- MicrosoftTranslation (``microsoft``): Microsoft Translator, global resource.
"""

from core.trans.engines.trans_deepl import DeeplTranslation
from core.trans.engines.trans_google_cloud import GoogleCloudTranslation
from core.trans.engines.trans_microsoft import AzureTranslation, MicrosoftTranslation

__all__: list[str] = [
    "AzureTranslation",
    "DeeplTranslation",
    "GoogleCloudTranslation",
    "MicrosoftTranslation",
]
