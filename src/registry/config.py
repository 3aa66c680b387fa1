import os
from dataclasses import dataclass

from dotenv import load_dotenv

from src.registry.record import PORT_MAX, TTL_MAX


def _env_flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class Settings:
    host: str = '0.0.0.0'
    http_port: int = 8080
    default_port: int = 443
    initial_ttl: int = 60
    expire_period: int = 10
    trust_proxy: bool = False

    def __post_init__(self):
        if not 0 <= self.http_port <= PORT_MAX:
            raise ValueError(f'http_port must be 0-{PORT_MAX}, got {self.http_port}')
        if not 0 <= self.default_port <= PORT_MAX:
            raise ValueError(f'default_port must be 0-{PORT_MAX}, got {self.default_port}')
        if not 1 <= self.initial_ttl <= TTL_MAX:
            raise ValueError(f'initial_ttl must be 1-{TTL_MAX}, got {self.initial_ttl}')
        if self.expire_period <= 0:
            raise ValueError(f'expire_period must be positive, got {self.expire_period}')

    @classmethod
    def from_env(cls) -> 'Settings':
        """Read RDV_* variables, after loading a .env file if there is one."""
        load_dotenv()
        return cls(
            host=os.getenv('RDV_HOST', '0.0.0.0'),
            http_port=int(os.getenv('RDV_HTTP_PORT', '8080')),
            default_port=int(os.getenv('RDV_DEFAULT_PORT', '443')),
            initial_ttl=int(os.getenv('RDV_TTL', '60')),
            expire_period=int(os.getenv('RDV_EXPIRE_PERIOD', '10')),
            trust_proxy=_env_flag('RDV_TRUST_PROXY'),
        )
