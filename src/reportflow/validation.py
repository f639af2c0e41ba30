from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .settings import DEFAULTS
from .utils.file_ops import resolve_asset_path


@dataclass
class ValidationIssue:
    path: str
    message: str
    severity: str = "error"  # 'error' | 'warn'


@dataclass
class ValidationResult:
    issues: List[ValidationIssue]

    def ok(self) -> bool:
        return all(i.severity != 'error' for i in self.issues)


DOCUMENT_INFO_KEYS = ["subject", "title", "creator"]
TEXT_KEYS = ["headline", "paragraph", "longParagraph"]


def _check_asset(
    issues: List[ValidationIssue],
    path: str,
    asset: Any,
    search_path: Optional[Sequence[str]],
    strict_assets: bool,
) -> None:
    if not isinstance(asset, str) or not asset.strip():
        issues.append(ValidationIssue(path=path, message="Asset reference not a non-empty string"))
        return
    if search_path is None:
        return
    if resolve_asset_path(asset, search_path) is None:
        issues.append(
            ValidationIssue(
                path=path,
                message=f"Asset not found in search path: {asset}",
                severity='error' if strict_assets else 'warn',
            )
        )


def validate_payload(
    payload: Dict[str, Any],
    search_path: Optional[Sequence[str]] = None,
    strict_assets: bool = False,
) -> ValidationResult:
    """Validate a report payload before rendering.

    search_path: when given, referenced template/graphics/image files are looked up.
    strict_assets: when True missing assets are upgraded from warn to error.
    """
    issues: List[ValidationIssue] = []
    if not isinstance(payload, dict):
        return ValidationResult([ValidationIssue(path="/", message="Payload root not an object")])

    info = payload.get("documentInfo")
    if info is None:
        issues.append(
            ValidationIssue(path="/documentInfo", message="Missing documentInfo", severity='warn')
        )
    elif not isinstance(info, dict):
        issues.append(ValidationIssue(path="/documentInfo", message="documentInfo not an object"))
    else:
        for k in DOCUMENT_INFO_KEYS:
            if not isinstance(info.get(k), str) or not info.get(k):
                issues.append(
                    ValidationIssue(
                        path=f"/documentInfo/{k}", message="Missing metadata field", severity='warn'
                    )
                )

    templates = payload.get("templates")
    if not isinstance(templates, dict) or not templates.get("templateMain"):
        issues.append(
            ValidationIssue(path="/templates/templateMain", message="No template defined")
        )
    else:
        _check_asset(
            issues,
            "/templates/templateMain",
            templates["templateMain"],
            search_path,
            strict_assets,
        )

    for k in TEXT_KEYS:
        v = payload.get(k)
        if v is not None and not isinstance(v, str):
            issues.append(ValidationIssue(path=f"/{k}", message="Expected a string"))

    graphics = payload.get("graphics")
    if graphics is not None:
        if not isinstance(graphics, list):
            issues.append(ValidationIssue(path="/graphics", message="graphics not a list"))
        else:
            for idx, g in enumerate(graphics):
                _check_asset(issues, f"/graphics/{idx}", g, search_path, strict_assets)

    image = payload.get("image")
    if image is not None:
        if not isinstance(image, dict):
            issues.append(ValidationIssue(path="/image", message="image not an object"))
        elif image.get("source"):
            _check_asset(issues, "/image/source", image["source"], search_path, strict_assets)

    table = payload.get("table")
    if table is not None:
        if not isinstance(table, dict):
            issues.append(ValidationIssue(path="/table", message="table not an object"))
        else:
            content = table.get("tableContent")
            if content is not None and not isinstance(content, dict):
                issues.append(
                    ValidationIssue(
                        path="/table/tableContent", message="tableContent not a key/value object"
                    )
                )

    settings = payload.get("settings")
    if settings is not None:
        if not isinstance(settings, dict):
            issues.append(ValidationIssue(path="/settings", message="settings not an object"))
        else:
            for k in settings:
                if str(k).upper() not in DEFAULTS:
                    issues.append(
                        ValidationIssue(
                            path=f"/settings/{k}", message="Unknown layout setting", severity='warn'
                        )
                    )

    return ValidationResult(issues)
