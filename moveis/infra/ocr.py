# moveis/infra/ocr.py
"""
Reconhecimento de texto em fotos de etiquetas via API HTTP (compatível com OCR.space).
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import httpx

from moveis.config import DEFAULTS, DefaultConfig
from moveis.exceptions import ServicoExternoError
from moveis.infra.logger import log_servico


def reconhecer_texto(caminho: Union[str, Path], idioma: str = "por", config: DefaultConfig = DEFAULTS) -> str:
    """Envia a imagem e devolve o texto reconhecido (linhas unidas por \\n)."""
    if not config.ocr_api_key:
        raise ServicoExternoError("CHAVE_AUSENTE", "OCR_API_KEY não configurada", servico="ocr")
    caminho = Path(caminho)
    if not caminho.is_file():
        raise ServicoExternoError("OCR_FALHOU", f"Imagem não encontrada: {caminho}", caminho=str(caminho))

    url = config.ocr_api_url
    try:
        with httpx.Client(timeout=config.http_timeout, headers={"User-Agent": config.user_agent}) as client:
            with caminho.open("rb") as fh:
                response = client.post(
                    url,
                    headers={"apikey": config.ocr_api_key},
                    data={"language": idioma, "OCREngine": "2"},
                    files={"file": (caminho.name, fh)},
                )
    except httpx.RequestError as exc:
        log_servico("ocr", url, error=str(exc))
        raise ServicoExternoError("SERVICO_INDISPONIVEL", f"OCR indisponível: {exc}", servico="ocr") from exc

    log_servico("ocr", url, status=response.status_code, arquivo=caminho.name)
    if response.status_code >= 400:
        raise ServicoExternoError("OCR_FALHOU", f"OCR respondeu HTTP {response.status_code}")

    payload = response.json()
    if payload.get("IsErroredOnProcessing"):
        erro = payload.get("ErrorMessage") or "erro desconhecido"
        if isinstance(erro, list):
            erro = "; ".join(str(e) for e in erro)
        raise ServicoExternoError("OCR_FALHOU", f"Erro ao processar imagem: {erro}")
    partes = [r.get("ParsedText", "") for r in payload.get("ParsedResults") or []]
    return "\n".join(p.strip("\r\n") for p in partes if p).replace("\r\n", "\n")
