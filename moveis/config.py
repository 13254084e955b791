# moveis/config.py
"""
Configurações globais e valores padrão do sistema da loja de móveis.

Os valores podem ser sobrescritos por variáveis de ambiente.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip().upper() for item in raw.split(",") if item.strip()]


# Caminho padrão do banco de dados SQLite (persistência opcional da CLI)
DB_PATH = os.getenv("MOVEIS_DB", os.path.join(os.getcwd(), "moveis.db"))

# Equipe da loja (vendedores e operadores)
SYSTEM_USERS: List[str] = [
    "ANA",
    "ALESSANDRA",
    "DEISE",
    "EDUARDA",
    "JOHNATTAN",
    "JULIANO",
    "LARISSA",
    "LUCAS",
    "LUIZA",
    "RODOLFO",
    "ROMUALDO",
    "VITOR",
]

FABRICANTES: List[str] = [
    "DallaCosta",
    "Artesano",
    "Mobly",
    "Muma",
    "Oppa",
    "Westwing",
]

# Usuários com permissão de remover produtos
ADMIN_USERS: List[str] = _env_list("MOVEIS_ADMINS", ["ADMIN"])


@dataclass
class DefaultConfig:
    """Valores padrão para integrações e apresentação."""
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    osrm_url: str = "https://router.project-osrm.org/route/v1/driving"
    ocr_api_url: str = "https://api.ocr.space/parse/image"
    ocr_api_key: str = ""
    http_timeout: float = 10.0  # segundos
    user_agent: str = "moveis-estoque/0.1"
    background_image_url: str = ""
    background_image_url_dark: str = ""
    admins: List[str] = field(default_factory=lambda: list(ADMIN_USERS))

    def imagem_fundo(self, escuro: bool = False) -> str:
        """URL da imagem de fundo; sem a versão escura usa a clara."""
        if escuro and self.background_image_url_dark:
            return self.background_image_url_dark
        return self.background_image_url


def load_defaults() -> DefaultConfig:
    """Monta a configuração lendo as variáveis de ambiente atuais."""
    return DefaultConfig(
        nominatim_url=os.getenv("MOVEIS_NOMINATIM_URL", DefaultConfig.nominatim_url),
        osrm_url=os.getenv("MOVEIS_OSRM_URL", DefaultConfig.osrm_url),
        ocr_api_url=os.getenv("MOVEIS_OCR_URL", DefaultConfig.ocr_api_url),
        ocr_api_key=os.getenv("OCR_API_KEY", ""),
        http_timeout=float(os.getenv("MOVEIS_HTTP_TIMEOUT", str(DefaultConfig.http_timeout))),
        user_agent=os.getenv("MOVEIS_USER_AGENT", DefaultConfig.user_agent),
        background_image_url=os.getenv("MOVEIS_BACKGROUND_IMAGE_URL", ""),
        background_image_url_dark=os.getenv("MOVEIS_BACKGROUND_IMAGE_URL_DARK", ""),
        admins=_env_list("MOVEIS_ADMINS", ["ADMIN"]),
    )


# Instância global dos valores padrão
DEFAULTS = load_defaults()
