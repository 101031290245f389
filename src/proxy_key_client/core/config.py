"""Configuration management for the access-key client.

Values come from environment variables (optionally via a .env file) or a
YAML profile file. The management API URL embeds the server's API secret,
so it is masked whenever configuration is displayed.
"""

import os
import re
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field, fields
from urllib.parse import urlsplit
from dotenv import load_dotenv

from .exceptions import ConfigurationError

FINGERPRINT_PATTERN = re.compile(r'^[0-9a-fA-F]{64}$')

# Environment variable backing each config field
ENV_VARS = {
    'api_url': 'API_URL',
    'cert_sha256': 'CERT_SHA256',
    'request_timeout': 'REQUEST_TIMEOUT',
    'connect_timeout': 'CONNECT_TIMEOUT',
    'log_level': 'LOG_LEVEL',
}


def seconds(value: Any, name: str) -> float:
    """Parse a timeout value, raising ConfigurationError if it is not a positive number."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}")
    if result <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return result


@dataclass
class Config:
    """Configuration for the access-key client.
    
    Environment variables are loaded in priority order:
    1. Command-line arguments
    2. Environment variables
    3. .env file
    4. Configuration file profile
    5. Default values
    """
    
    # Management API
    api_url: str = field(default_factory=lambda: os.getenv('API_URL', ''))
    cert_sha256: Optional[str] = field(default_factory=lambda: os.getenv('CERT_SHA256') or None)
    
    # Timeouts in seconds
    request_timeout: float = field(default_factory=lambda: seconds(os.getenv('REQUEST_TIMEOUT', '30'), 'REQUEST_TIMEOUT'))
    connect_timeout: float = field(default_factory=lambda: seconds(os.getenv('CONNECT_TIMEOUT', '10'), 'CONNECT_TIMEOUT'))
    
    # Logging
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', 'WARNING'))
    
    # Output formatting
    output_format: str = field(default='auto')  # auto, json, table, yaml
    
    # Profile management
    profile: str = field(default='default')
    config_file: Optional[Path] = field(default=None)
    
    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> 'Config':
        """Create config from environment variables and optional .env file.
        
        Args:
            env_file: Path to .env file (default: looks for .env in current dir)
        
        Returns:
            Config instance with loaded values
        """
        if env_file:
            if env_file.exists():
                load_dotenv(env_file)
        elif Path('.env').exists():
            load_dotenv()
        
        return cls()
    
    @classmethod
    def from_file(cls, config_file: Path, profile: str = 'default') -> 'Config':
        """Load configuration from YAML file.
        
        The file holds a ``defaults`` mapping and a ``profiles`` mapping of
        named servers. Environment variables win over file values.
        
        Args:
            config_file: Path to YAML configuration file
            profile: Profile name to load
        
        Returns:
            Config instance with loaded values
        
        Raises:
            ConfigurationError: If file doesn't exist, is invalid, or lacks the profile
        """
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {config_file}")
        
        profiles = data.get('profiles') or {}
        if profile != 'default' and profile not in profiles:
            raise ConfigurationError(f"Profile '{profile}' not found in {config_file}")
        
        config_data = {**(data.get('defaults') or {}), **(profiles.get(profile) or {})}
        
        config = cls()
        known = {f.name for f in fields(cls)}
        for key, value in config_data.items():
            if key not in known:
                continue
            # Only override if env var not set
            env_var = ENV_VARS.get(key)
            if env_var is None or not os.getenv(env_var):
                if isinstance(value, str) and '${' in value:
                    value = os.path.expandvars(value)
                if key in ('request_timeout', 'connect_timeout'):
                    value = seconds(value, key)
                setattr(config, key, value)
        
        config.profile = profile
        config.config_file = config_file
        
        return config
    
    def validate(self) -> List[str]:
        """Validate configuration and return list of warnings.
        
        Returns:
            List of warning messages (empty if all valid)
        """
        warnings = []
        
        if not self.api_url:
            warnings.append("No management API URL configured (set API_URL)")
        elif not self.api_url.startswith('https://'):
            warnings.append(f"Management API URL is not https: {self.masked_api_url()}")
        
        if self.cert_sha256 and not FINGERPRINT_PATTERN.match(self.cert_sha256):
            warnings.append("CERT_SHA256 is not a 64 character hex SHA-256 fingerprint")
        
        return warnings
    
    def require_api_url(self) -> str:
        """Return the API URL, raising ConfigurationError if it is not set."""
        if not self.api_url:
            raise ConfigurationError("No management API URL configured (set API_URL)")
        return self.api_url
    
    def masked_api_url(self) -> str:
        """API URL with its secret path replaced by ``***``."""
        if not self.api_url:
            return ''
        parts = urlsplit(self.api_url)
        return f"{parts.scheme}://{parts.netloc}/***" if parts.path.strip('/') else self.api_url
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.
        
        Returns:
            Dictionary representation of configuration
        """
        return {
            'api_url': self.masked_api_url(),
            'cert_sha256': self.cert_sha256,
            'request_timeout': self.request_timeout,
            'connect_timeout': self.connect_timeout,
            'log_level': self.log_level,
            'output_format': self.output_format,
            'profile': self.profile,
        }
    
    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(profile={self.profile}, api_url={self.masked_api_url()})"
