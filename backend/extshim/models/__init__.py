from .campaign import Campaign, LocalizedText, PresentationType, ResolvedNotification, ViewedState
from .storage import ExtensionKeyValue
