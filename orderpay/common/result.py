"""
Résultat étiqueté Ok | Fail pour les routes appelées par la plateforme d'automatisation.

- Toujours sérialisé en HTTP 200 avec un booléen `success`
- Les champs additionnels (payload) sont fusionnés à plat dans le JSON
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from fastapi.responses import JSONResponse


@dataclass(frozen=True)
class Ok:
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, **self.payload}

    def to_response(self) -> JSONResponse:
        return JSONResponse(self.to_dict(), status_code=200)


@dataclass(frozen=True)
class Fail:
    error: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": self.error, **self.payload}

    def to_response(self) -> JSONResponse:
        # Jamais de code d'erreur HTTP: l'appelant ne sait pas brancher dessus
        return JSONResponse(self.to_dict(), status_code=200)


Result = Union[Ok, Fail]


def ok(**payload: Any) -> Ok:
    return Ok(payload)


def fail(error: str, **payload: Any) -> Fail:
    return Fail(error, payload)
