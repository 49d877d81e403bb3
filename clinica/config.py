from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

TZ_PADRAO = "America/Sao_Paulo"


def zona_local() -> ZoneInfo:
    """Fuso da clínica: as datas da agenda são sempre interpretadas nele."""
    return ZoneInfo(os.getenv("TZ_CLINICA", TZ_PADRAO))


def _safe_float(env_var: str, default: str) -> float:
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Valor inválido para {env_var}: {raw!r}") from None


@dataclass(frozen=True)
class Config:
    """Configuração do front-end lida do ambiente (ou do .env)."""

    api_base: str = field(default_factory=lambda: os.getenv("API_BASE", "http://127.0.0.1:8080/api").rstrip("/"))
    api_timeout: float = field(default_factory=lambda: _safe_float("API_TIMEOUT", "10"))
    tz_clinica: str = field(default_factory=lambda: os.getenv("TZ_CLINICA", TZ_PADRAO))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def zona(self) -> ZoneInfo:
        return ZoneInfo(self.tz_clinica)


def valida_config(config: Config) -> None:
    if not config.api_base.startswith(("http://", "https://")):
        raise ValueError(f"API_BASE deve começar com http:// ou https://, recebido {config.api_base!r}")
    if config.api_timeout <= 0:
        raise ValueError(f"API_TIMEOUT deve ser > 0, recebido {config.api_timeout}")
    try:
        ZoneInfo(config.tz_clinica)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"TZ_CLINICA desconhecido: {config.tz_clinica!r}") from None


def configura_logging(config: Config) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def carrega_config() -> Config:
    """Lê, valida e aplica o nível de log."""
    config = Config()
    valida_config(config)
    configura_logging(config)
    logger.debug("Configuração carregada: API %s, fuso %s", config.api_base, config.tz_clinica)
    return config
