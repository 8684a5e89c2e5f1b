"""teamkeys - signed team rosters mapping email addresses to key fingerprints."""

__version__ = "0.1.0"
