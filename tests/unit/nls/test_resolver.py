"""
Tests for NLS configuration resolution.

These tests drive the whole pipeline against files under ``tmp_path``:
short-circuits to the default configuration, pack resolution, cache reuse,
corruption recovery and graceful degradation on failures.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from unittest.mock import patch

import pytest

from nls_resolver.config.schema import ResolverConfig
from nls_resolver.nls.cache import mark_cache_corrupted
from nls_resolver.nls.resolver import (
    DID_GENERATE_MARK,
    WILL_GENERATE_MARK,
    NLSResolver,
    PerformanceMarks,
    default_configuration,
    resolve_nls_configuration,
)
from nls_resolver.nls import resolver as resolver_module
from nls_resolver.nls.types import InternalNLSConfiguration, NLSConfiguration
from tests.utils.test_helpers import FRENCH_CONTENTS, FRENCH_MESSAGES, NLSEnvironment, write_json


class RecordingObserver:
    """Observer collecting event names."""

    def __init__(self) -> None:
        self.events: list[str] = []

    def resolution_started(self) -> None:
        self.events.append("started")

    def resolution_finished(self) -> None:
        self.events.append("finished")


class TestDefaultConfiguration:
    """Test the untranslated configuration."""

    def test_default_configuration(self) -> None:
        """No languages are available."""
        config = default_configuration("de", "de-de")

        assert config == NLSConfiguration(
            user_locale="de", os_locale="de-de", available_languages={}, pseudo=None
        )
        assert config.is_default
        assert config.to_dict() == {
            "userLocale": "de",
            "osLocale": "de-de",
            "availableLanguages": {},
        }

    def test_pseudo_flag(self) -> None:
        """The pseudo flag is carried through."""
        assert default_configuration("pseudo", "en", True).to_dict()["pseudo"] is True


class TestShortCircuit:
    """Test requests that never look at language packs."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("locale", ["en", "en-us"])
    async def test_english_short_circuits(self, nls_env: NLSEnvironment, locale: str) -> None:
        """English is served by the built-in messages regardless of the manifest."""
        nls_env.install_pack(locale="en")
        resolver = NLSResolver()

        config = await resolver.resolve_configuration(nls_env.context(user_locale=locale))

        assert config == NLSConfiguration(user_locale=locale, os_locale="fr-ca")
        assert not nls_env.cache_folder.exists()

    @pytest.mark.asyncio
    async def test_pseudo_locale(self, nls_env: NLSEnvironment) -> None:
        """The pseudo locale enables pseudo-localization."""
        config = await NLSResolver().resolve_configuration(
            nls_env.context(user_locale="pseudo")
        )

        assert config.pseudo is True
        assert config.is_default

    @pytest.mark.asyncio
    async def test_without_commit(self, nls_env: NLSEnvironment) -> None:
        """Without a build identifier nothing is cached."""
        nls_env.install_pack()

        config = await NLSResolver().resolve_configuration(nls_env.context(commit=None))

        assert config.is_default
        assert not nls_env.cache_folder.exists()

    @pytest.mark.asyncio
    async def test_english_match_is_exact(self, nls_env: NLSEnvironment) -> None:
        """en-US is not a built-in locale and resolves through the manifest."""
        nls_env.install_pack(locale="en")

        config = await NLSResolver().resolve_configuration(nls_env.context(user_locale="en-US"))

        assert config.available_languages == {"*": "en"}

    @pytest.mark.asyncio
    async def test_pipeline_without_commit(self, nls_env: NLSEnvironment) -> None:
        """The pipeline itself refuses to cache without a build identifier."""
        nls_env.install_pack()
        resolver = NLSResolver()

        config = await resolver._resolve(nls_env.context(commit=None))  # pyright: ignore[reportPrivateUsage]

        assert config.is_default
        assert not nls_env.cache_folder.exists()

    @pytest.mark.asyncio
    async def test_dev_mode(
        self, nls_env: NLSEnvironment, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The development flag forces the default configuration."""
        nls_env.install_pack()
        monkeypatch.setenv("VSCODE_DEV", "1")

        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert config.is_default

    @pytest.mark.asyncio
    async def test_custom_dev_mode_variable(
        self, nls_env: NLSEnvironment, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The development flag name is configurable."""
        nls_env.install_pack()
        monkeypatch.setenv("APP_DEV", "1")
        resolver = NLSResolver(ResolverConfig(dev_mode_env_var="APP_DEV"))

        config = await resolver.resolve_configuration(nls_env.context())

        assert config.is_default


class TestResolution:
    """Test resolution against installed packs."""

    @pytest.mark.asyncio
    async def test_region_resolves_to_language_pack(self, nls_env: NLSEnvironment) -> None:
        """fr-CA uses the fr pack and materializes its cache entry."""
        nls_env.install_pack()

        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert isinstance(config, InternalNLSConfiguration)
        assert config.user_locale == "fr-CA"
        assert config.os_locale == "fr-ca"
        assert config.available_languages == {"*": "fr"}
        assert config.language_pack_id == "h1.fr"
        cache_root = nls_env.cache_folder / "h1.fr"
        assert config.cache_root == cache_root
        assert config.resolved_language_pack_core_location == cache_root / "abc"
        assert config.translations_config_file == cache_root / "tcf.json"
        assert config.corrupted_file == cache_root / "corrupted.info"
        messages_file = cache_root / "abc" / "nls.messages.json"
        assert json.loads(messages_file.read_text(encoding="utf-8")) == FRENCH_MESSAGES

    @pytest.mark.asyncio
    async def test_null_module_in_pack(self, nls_env: NLSEnvironment) -> None:
        """A module mapped to null in the pack file does not discard the pack."""
        contents: dict[str, object] = {**FRENCH_CONTENTS, "vs/workbench/browser/parts/titlebar": None}
        _ = write_json(nls_env.pack_file, {"contents": contents})
        nls_env.install_pack()

        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert config.available_languages == {"*": "fr"}
        messages_file = nls_env.cache_folder / "h1.fr" / "abc" / "nls.messages.json"
        assert json.loads(messages_file.read_text(encoding="utf-8")) == FRENCH_MESSAGES

    @pytest.mark.asyncio
    async def test_to_dict(self, nls_env: NLSEnvironment) -> None:
        """The resolved configuration renders the internal fields."""
        nls_env.install_pack()

        config = await NLSResolver().resolve_configuration(nls_env.context())

        data = config.to_dict()
        assert data["availableLanguages"] == {"*": "fr"}
        assert data["_languagePackId"] == "h1.fr"
        assert data["_resolvedLanguagePackCoreLocation"] == str(
            nls_env.cache_folder / "h1.fr" / "abc"
        )
        assert "pseudo" not in data

    @pytest.mark.asyncio
    async def test_no_manifest(self, nls_env: NLSEnvironment) -> None:
        """Without installed packs the defaults are used."""
        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert config == NLSConfiguration(user_locale="fr-CA", os_locale="fr-ca")

    @pytest.mark.asyncio
    async def test_no_matching_pack(self, nls_env: NLSEnvironment) -> None:
        """A locale without a pack uses the defaults."""
        nls_env.install_pack(locale="de")

        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert config.is_default
        assert config.user_locale == "fr-CA"

    @pytest.mark.asyncio
    async def test_invalid_pack_keeps_requested_locale(self, nls_env: NLSEnvironment) -> None:
        """A matched but unusable pack falls back with the requested locale."""
        nls_env.write_manifest({"fr": {"hash": "h1", "translations": {}}})

        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert config == NLSConfiguration(user_locale="fr-CA", os_locale="fr-ca")

    @pytest.mark.asyncio
    async def test_materialization_failure(self, nls_env: NLSEnvironment) -> None:
        """Broken default catalogs degrade to the default configuration."""
        nls_env.install_pack()
        (nls_env.nls_metadata_path / "nls.keys.json").unlink()

        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert config.is_default
        assert not (nls_env.cache_folder / "h1.fr" / "abc").exists()

    @pytest.mark.asyncio
    async def test_unexpected_error_never_escapes(
        self, nls_env: NLSEnvironment, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Errors outside the stages are logged and collapse to the defaults."""
        nls_env.install_pack()

        with patch(
            "nls_resolver.nls.resolver.resolve_pack_locale",
            side_effect=RuntimeError("boom"),
        ), caplog.at_level(logging.WARNING):
            config = await NLSResolver().resolve_configuration(nls_env.context())

        assert config.is_default
        assert "boom" in caplog.text


class TestCacheReuse:
    """Test behaviour across repeated resolutions."""

    @pytest.mark.asyncio
    async def test_second_resolution_reuses_cache(self, nls_env: NLSEnvironment) -> None:
        """A cache hit neither re-reads nor re-writes the cache files."""
        nls_env.install_pack()
        resolver = NLSResolver()
        first = await resolver.resolve_configuration(nls_env.context())
        commit_dir = nls_env.cache_folder / "h1.fr" / "abc"
        os.utime(commit_dir, (1_000_000, 1_000_000))

        with patch("nls_resolver.nls.resolver.materialize") as mock_materialize:
            second = await resolver.resolve_configuration(nls_env.context())
            await resolver.wait_for_background_tasks()

        mock_materialize.assert_not_called()
        assert second == first
        assert commit_dir.stat().st_mtime > 1_000_000

    @pytest.mark.asyncio
    async def test_existing_commit_dir_is_trusted(self, nls_env: NLSEnvironment) -> None:
        """Existence of the commit folder alone marks the entry as valid."""
        nls_env.install_pack()
        commit_dir = nls_env.cache_folder / "h1.fr" / "abc"
        commit_dir.mkdir(parents=True)
        resolver = NLSResolver()

        config = await resolver.resolve_configuration(nls_env.context())
        await resolver.wait_for_background_tasks()

        assert isinstance(config, InternalNLSConfiguration)
        assert not (commit_dir / "nls.messages.json").exists()

    @pytest.mark.asyncio
    async def test_corruption_recovery(self, nls_env: NLSEnvironment) -> None:
        """A corrupted entry is deleted and regenerated instead of reused."""
        nls_env.install_pack()
        resolver = NLSResolver()
        config = await resolver.resolve_configuration(nls_env.context())
        assert isinstance(config, InternalNLSConfiguration)
        _ = config.messages_file.write_text('["stale"]', encoding="utf-8")
        mark_cache_corrupted(config.corrupted_file)

        recovered = await resolver.resolve_configuration(nls_env.context())

        assert isinstance(recovered, InternalNLSConfiguration)
        assert not recovered.corrupted_file.exists()
        assert json.loads(recovered.messages_file.read_text(encoding="utf-8")) == FRENCH_MESSAGES

    @pytest.mark.asyncio
    async def test_new_pack_hash_gets_new_entry(self, nls_env: NLSEnvironment) -> None:
        """Updating the pack changes its id and therefore its cache folder."""
        nls_env.install_pack(pack_hash="h1")
        _ = await NLSResolver().resolve_configuration(nls_env.context())
        nls_env.install_pack(pack_hash="h2")

        config = await NLSResolver().resolve_configuration(nls_env.context())

        assert isinstance(config, InternalNLSConfiguration)
        assert config.language_pack_id == "h2.fr"
        assert (nls_env.cache_folder / "h1.fr").exists()
        assert (nls_env.cache_folder / "h2.fr" / "abc" / "nls.messages.json").exists()


class TestObserver:
    """Test start/finish notifications."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("locale", ["en", "fr-CA", "de"])
    async def test_events_on_every_path(self, nls_env: NLSEnvironment, locale: str) -> None:
        """Each resolution reports exactly one start and one finish."""
        nls_env.install_pack()
        observer = RecordingObserver()

        _ = await NLSResolver(observer=observer).resolve_configuration(
            nls_env.context(user_locale=locale)
        )

        assert observer.events == ["started", "finished"]

    @pytest.mark.asyncio
    async def test_performance_marks(self, nls_env: NLSEnvironment) -> None:
        """The default observer records named marks."""
        marks = PerformanceMarks()

        _ = await NLSResolver(observer=marks).resolve_configuration(nls_env.context())

        assert [name for name, _ in marks.marks] == [WILL_GENERATE_MARK, DID_GENERATE_MARK]
        duration = marks.duration()
        assert duration is not None and duration >= 0

    def test_duration_without_marks(self) -> None:
        """No duration is reported before a resolution finished."""
        assert PerformanceMarks().duration() is None


class TestResolveNLSConfiguration:
    """Test the module-level convenience coroutine."""

    @pytest.mark.asyncio
    async def test_resolves(self, nls_env: NLSEnvironment) -> None:
        """The coroutine resolves like a resolver instance."""
        nls_env.install_pack()

        config = await resolve_nls_configuration(
            user_locale="fr-CA",
            os_locale="fr-ca",
            user_data_path=nls_env.user_data_path,
            commit="abc",
            nls_metadata_path=nls_env.nls_metadata_path,
        )

        assert config.available_languages == {"*": "fr"}

    @pytest.mark.asyncio
    async def test_cache_hit_touch_outlives_resolver(self, nls_env: NLSEnvironment) -> None:
        """The freshness touch stays referenced after the one-off resolver is gone."""
        nls_env.install_pack()
        kwargs = {
            "user_locale": "fr-CA",
            "os_locale": "fr-ca",
            "user_data_path": nls_env.user_data_path,
            "commit": "abc",
            "nls_metadata_path": nls_env.nls_metadata_path,
        }
        _ = await resolve_nls_configuration(**kwargs)  # pyright: ignore[reportArgumentType]
        commit_dir = nls_env.cache_folder / "h1.fr" / "abc"
        os.utime(commit_dir, (1_000_000, 1_000_000))

        config = await resolve_nls_configuration(**kwargs)  # pyright: ignore[reportArgumentType]
        pending = list(resolver_module._detached_tasks)  # pyright: ignore[reportPrivateUsage]

        assert config.available_languages == {"*": "fr"}
        assert len(pending) == 1
        _ = await asyncio.gather(*pending)
        assert commit_dir.stat().st_mtime > 1_000_000
        assert not resolver_module._detached_tasks  # pyright: ignore[reportPrivateUsage]
