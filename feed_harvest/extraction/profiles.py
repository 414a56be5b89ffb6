"""Site profile resolution: which selectors to use for a given site."""

from typing import Iterable

from ..config import PipelineConfig, SiteProfile, SiteProfileRule
from ..utils import extract_domain, normalize_hostname


class ProfileResolver:
    """Maps a hostname to an extraction profile, first matching rule wins."""

    def __init__(self, rules: Iterable[SiteProfileRule], default: SiteProfile):
        self.rules = tuple(rules)
        self.default = default

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "ProfileResolver":
        return cls(config.site_profiles, config.default_profile)

    def resolve(self, hostname: str) -> SiteProfile:
        """Return the profile of the first rule contained in the hostname.

        A leading "www." is ignored. Unknown hosts get the default profile.
        """
        host = normalize_hostname(hostname)
        for rule in self.rules:
            if rule.match in host:
                return rule.profile
        return self.default

    def resolve_url(self, url: str) -> SiteProfile:
        return self.resolve(extract_domain(url))
