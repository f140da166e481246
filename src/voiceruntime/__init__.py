"""
voiceruntime public package interface.

Runtime services for bootstrapping a voice-processing system: building
components from textual descriptors, resolving the phone set for a voice or
locale, and deciding where audio output is buffered under memory pressure.
"""

from .config import ConfigurationError, PropertyStore, get_store, set_store
from .destination import AudioDestination, DestinationMode, create_audio_destination
from .factory import ComponentRegistry, ObjectDescriptor, default_registry, instantiate
from .memory import MemoryPolicy, is_low_memory, is_very_low_memory
from .phoneset import PhoneSet, parse_phone_set
from .resources import ResourceCache, ResourceResolver, load_required, resolve_for_context, resolve_for_locale
from .startup import Runtime, SystemState, ensure_started
from .voices import VoiceProfile, VoiceRegistry

__all__ = [
    "AudioDestination",
    "ComponentRegistry",
    "ConfigurationError",
    "DestinationMode",
    "MemoryPolicy",
    "ObjectDescriptor",
    "PhoneSet",
    "PropertyStore",
    "ResourceCache",
    "ResourceResolver",
    "Runtime",
    "SystemState",
    "VoiceProfile",
    "VoiceRegistry",
    "create_audio_destination",
    "default_registry",
    "ensure_started",
    "get_store",
    "instantiate",
    "is_low_memory",
    "is_very_low_memory",
    "load_required",
    "parse_phone_set",
    "resolve_for_context",
    "resolve_for_locale",
    "set_store",
]

__version__ = "0.1.0"

default_registry.register("voiceruntime.VoiceProfile", VoiceProfile, arities=(2,))
default_registry.register("voiceruntime.MemoryPolicy", MemoryPolicy, arities=(0,))
