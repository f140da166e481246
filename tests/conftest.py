import pytest

from voiceruntime import config, destination, memory, resources, startup, voices
from voiceruntime.paths import VR_CACHE_ENV, VR_CONFIG_ENV

GERMAN_PHONES = """<allophones name="sampa" xml:lang="de" features="vlng ctype">
  <silence ph="_"/>
  <vowel ph="a" vlng="s"/>
  <vowel ph="a:" vlng="l"/>
  <consonant ph="p" ctype="s"/>
  <tone ph="1"/>
</allophones>
"""

ENGLISH_PHONES = """<allophones name="arpabet" xml:lang="en-US" features="vlng">
  <silence ph="_"/>
  <vowel ph="AA" vlng="l"/>
  <consonant ph="T"/>
</allophones>
"""


@pytest.fixture(autouse=True)
def _isolate_dirs(monkeypatch, tmp_path_factory):
    """Point config and cache directories at per-test temp dirs."""

    base = tmp_path_factory.mktemp("voiceruntime")
    (base / "conf").mkdir()
    monkeypatch.setenv(VR_CONFIG_ENV, str(base / "conf"))
    monkeypatch.setenv(VR_CACHE_ENV, str(base / "cache"))


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Drop every process-wide singleton before and after each test."""

    def _reset():
        config.reset_store()
        memory.set_memory_policy(None)
        destination.set_selector(None)
        resources.set_resolver(None)
        resources.default_cache.clear()
        startup.set_runtime(None)
        voices.default_voices.clear()

    _reset()
    yield
    _reset()


@pytest.fixture
def config_dir(tmp_path):
    conf = tmp_path / "conf"
    (conf / "de").mkdir(parents=True)
    (conf / "en").mkdir()
    (conf / "de" / "phones.xml").write_text(GERMAN_PHONES, encoding="utf-8")
    (conf / "en" / "phones.xml").write_text(ENGLISH_PHONES, encoding="utf-8")
    (conf / "10-runtime.config").write_text(
        "locales=de en_US\n"
        "voiceruntime.lowmemory=4000\n"
        "synthesis.audiostore=auto\n",
        encoding="utf-8",
    )
    (conf / "20-languages.config").write_text(
        "de.resourceset=de/phones.xml\n"
        "en_US.resourceset=en/phones.xml\n",
        encoding="utf-8",
    )
    return conf


@pytest.fixture
def store(config_dir):
    return config.PropertyStore.from_directory(config_dir)


@pytest.fixture
def phone_xml():
    return {"de": GERMAN_PHONES, "en_US": ENGLISH_PHONES}
