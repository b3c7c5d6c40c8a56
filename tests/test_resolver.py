"""
Tests for source resolution — registry, release listing, direct URL
and the strategy pipeline.
"""

import pytest

from phpx.core.errors import NetworkError, ToolNotFoundError
from phpx.core.models.config import PhpxConfig
from phpx.core.models.identifier import LATEST, ToolIdentifier
from phpx.core.models.tool import ComposerArtifact, PharArtifact, ToolInfo
from phpx.core.services.tool_runner.domain.identifier import parse_identifier
from phpx.core.services.tool_runner.resolver.base import ResolutionStrategy
from phpx.core.services.tool_runner.resolver.direct_url import DirectUrlStrategy
from phpx.core.services.tool_runner.resolver.pipeline import COMPOSER_PHAR_URL, SourceResolver
from phpx.core.services.tool_runner.resolver.registry import (
    PackagistStrategy,
    candidate_package_names,
    declared_bin_names,
)
from phpx.core.services.tool_runner.resolver.releases import GitHubReleasesStrategy

REGISTRY = "https://packagist.org"
API = "https://api.github.com"


def _zip(version: str, **extra) -> dict:
    return {"dist": {"type": "zip", "url": f"https://codeload.test/{version}.zip"}, **extra}


class TestPackagist:
    def test_range_selects_highest_matching(self, fake_http):
        fake_http.json[f"{REGISTRY}/packages/phpstan/phpstan.json"] = {"package": {"versions": {
            "1.9.0": _zip("1.9.0"),
            "1.10.0": _zip("1.10.0", bin=["bin/phpstan"]),
            "2.0.0": _zip("2.0.0"),
        }}}

        result = PackagistStrategy(fake_http).resolve(parse_identifier("phpstan@^1.0"))

        assert isinstance(result, ComposerArtifact)
        assert result.package.package == "phpstan/phpstan"
        assert result.version == "1.10.0"
        assert result.package.bin_name == "phpstan"

    def test_phar_dist(self, fake_http):
        fake_http.json[f"{REGISTRY}/packages/box/box.json"] = {"package": {"versions": {
            "4.0.0": {"dist": {"type": "phar", "url": "https://dl.test/box.phar"}},
        }}}

        result = PackagistStrategy(fake_http).resolve(ToolIdentifier(name="box"))

        assert isinstance(result, PharArtifact)
        assert result.info.download_url == "https://dl.test/box.phar"
        assert result.info.name == "box"
        assert result.version == "4.0.0"

    def test_zip_without_bin_defaults_to_last_segment(self, fake_http):
        fake_http.json[f"{REGISTRY}/packages/vimeo/psalm.json"] = {"package": {"versions": {
            "5.0.0": _zip("5.0.0"),
        }}}

        result = PackagistStrategy(fake_http).resolve(ToolIdentifier(name="vimeo/psalm"))

        assert result.package.bin_names == []
        assert result.package.bin_name == "psalm"

    def test_falls_back_to_bare_name(self, fake_http):
        fake_http.json[f"{REGISTRY}/packages/psalm.json"] = {"package": {"versions": {
            "v5.1.0": _zip("5.1.0"),
        }}}

        result = PackagistStrategy(fake_http).resolve(ToolIdentifier(name="psalm"))

        assert result.version == "5.1.0"
        urls = [url for _, url, _ in fake_http.requests]
        assert urls == [
            f"{REGISTRY}/packages/psalm/psalm.json",
            f"{REGISTRY}/packages/psalm.json",
        ]

    def test_unsupported_dist_type(self, fake_http):
        fake_http.json[f"{REGISTRY}/packages/x/x.json"] = {"package": {"versions": {
            "1.0.0": {"dist": {"type": "path", "url": "../x"}},
        }}}
        assert PackagistStrategy(fake_http).resolve(ToolIdentifier(name="x/x")) is None

    def test_no_matching_version_continues(self, fake_http):
        fake_http.json[f"{REGISTRY}/packages/x/x.json"] = {"package": {"versions": {
            "1.0.0": _zip("1.0.0"),
        }}}
        assert PackagistStrategy(fake_http).resolve(parse_identifier("x/x@^9.0")) is None

    def test_custom_registry_url(self, fake_http):
        fake_http.json["https://mirror.test/packages/x/x.json"] = {"package": {"versions": {
            "1.0.0": _zip("1.0.0"),
        }}}
        strategy = PackagistStrategy(fake_http, "https://mirror.test/")
        assert strategy.resolve(ToolIdentifier(name="x/x")) is not None

    def test_helpers(self):
        assert candidate_package_names("phpstan") == ["phpstan/phpstan", "phpstan"]
        assert candidate_package_names("a/b") == ["a/b"]
        assert declared_bin_names({"bin": ["bin/tool", "other"]}) == ["tool", "other"]
        assert declared_bin_names({"bin": "bin/single"}) == ["single"]


def _release(tag: str, *asset_names: str) -> dict:
    return {
        "tag_name": tag,
        "assets": [
            {"name": n, "browser_download_url": f"https://github.test/{tag}/{n}"}
            for n in asset_names
        ],
    }


class TestGitHubReleases:
    def test_latest_release_with_phar(self, fake_http):
        fake_http.json[f"{API}/repos/box/box/releases"] = [
            _release("v4.1.0", "box.phar", "box.phar.asc"),
            _release("v4.0.0", "box.phar"),
            _release("5.0.0-RC1", "box.phar"),
        ]

        result = GitHubReleasesStrategy(fake_http).resolve(ToolIdentifier(name="box"))

        assert isinstance(result, PharArtifact)
        assert result.version == "4.1.0"
        assert result.info.download_url == "https://github.test/v4.1.0/box.phar"
        assert result.info.signature_url == "https://github.test/v4.1.0/box.phar.asc"

    def test_checksum_asset(self, fake_http):
        fake_http.json[f"{API}/repos/box/box/releases"] = [
            _release("1.0.0", "box.phar", "box.phar.sha256"),
        ]
        result = GitHubReleasesStrategy(fake_http).resolve(ToolIdentifier(name="box"))
        assert result.info.signature_url.endswith(".sha256")

    def test_tries_repo_variants(self, fake_http):
        fake_http.json[f"{API}/repos/PHP-CS-Fixer/PHP-CS-Fixer/releases"] = [
            _release("v3.40.0", "php-cs-fixer.phar"),
        ]

        result = GitHubReleasesStrategy(fake_http).resolve(ToolIdentifier(name="php-cs-fixer"))

        assert result.version == "3.40.0"
        assert fake_http.requests[0][1] == f"{API}/repos/php-cs-fixer/php-cs-fixer/releases"

    def test_release_without_phar_is_skipped(self, fake_http):
        fake_http.json[f"{API}/repos/tool/tool/releases"] = [_release("1.0.0", "tool.tar.gz")]
        assert GitHubReleasesStrategy(fake_http).resolve(ToolIdentifier(name="tool")) is None

    def test_token_header(self, fake_http):
        GitHubReleasesStrategy(fake_http, token="s3cret").resolve(ToolIdentifier(name="tool"))
        headers = fake_http.requests[0][2]
        assert headers["Authorization"] == "Bearer s3cret"

    def test_no_token_header(self, fake_http):
        GitHubReleasesStrategy(fake_http).resolve(ToolIdentifier(name="tool"))
        assert "Authorization" not in fake_http.requests[0][2]


class TestDirectUrl:
    def test_only_for_latest(self, fake_http):
        strategy = DirectUrlStrategy(fake_http)
        assert strategy.resolve(parse_identifier("deployer@^7.0")) is None
        assert fake_http.requests == []

    def test_probes_conventional_urls(self, fake_http):
        url = "https://github.com/deployer/php-deployer/releases/latest/download/deployer.phar"
        fake_http.existing.add(url)

        result = DirectUrlStrategy(fake_http).resolve(parse_identifier("deployer@latest"))

        assert result.version == LATEST
        assert result.info.download_url == url
        assert result.info.signature_url == f"{url}.asc"
        assert len(fake_http.requests) == 2

    def test_nothing_found(self, fake_http):
        assert DirectUrlStrategy(fake_http).resolve(ToolIdentifier(name="nope")) is None
        assert len(fake_http.requests) == 3


class _Stub(ResolutionStrategy):
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def resolve(self, identifier):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def _phar(version: str = "1.0.0") -> PharArtifact:
    return PharArtifact(info=ToolInfo(name="tool", version=version, download_url="https://x.test"))


class TestSourceResolver:
    def test_first_result_wins(self):
        first, second = _Stub(result=_phar("1.0.0")), _Stub(result=_phar("2.0.0"))
        result = SourceResolver([first, second]).resolve(ToolIdentifier(name="tool"))
        assert result.version == "1.0.0"
        assert second.calls == 0

    def test_failing_stage_falls_through(self):
        failing = _Stub(error=NetworkError("offline"))
        result = SourceResolver([failing, _Stub(result=_phar())]).resolve(ToolIdentifier(name="tool"))
        assert result.version == "1.0.0"
        assert failing.calls == 1

    def test_all_empty(self):
        with pytest.raises(ToolNotFoundError):
            SourceResolver([_Stub(), _Stub(error=ValueError("bad"))]).resolve(
                ToolIdentifier(name="tool"),
            )

    def test_composer_special_case(self):
        stage = _Stub(result=_phar())
        result = SourceResolver([stage]).resolve(ToolIdentifier(name="composer"))
        assert result.info.download_url == COMPOSER_PHAR_URL
        assert result.version == LATEST
        assert stage.calls == 0

    def test_default_pipeline_order(self, fake_http):
        resolver = SourceResolver.default(fake_http, PhpxConfig(), github_token=None)
        assert [s.name for s in resolver.strategies] == [
            "packagist", "github-releases", "direct-url",
        ]

    def test_default_pipeline_end_to_end(self, fake_http):
        url = "https://github.com/tool/tool/releases/latest/download/tool.phar"
        fake_http.existing.add(url)
        result = SourceResolver.default(fake_http, PhpxConfig()).resolve(ToolIdentifier(name="tool"))
        assert result.info.download_url == url
