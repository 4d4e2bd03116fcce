from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from elbuenmenu_admin.api.errors import AdminApiError
from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.data.interface import DataAccess
from elbuenmenu_admin.data.models import PaymentConfig, SaveReport
from elbuenmenu_admin.logging import get_logger


class PaymentConfigStore:
    """Payment configuration kept both in a local JSON file and on the backend.

    The two copies are written independently: a failure on one side is logged and
    reported, and never stops the other write. Reads prefer the local file.
    """

    def __init__(self, data: DataAccess, path: Optional[str | Path] = None) -> None:
        self.data = data
        self.path = Path(path or get_config().payment_config_file)
        self.logger = get_logger(__name__)

    def load(self) -> PaymentConfig:
        if not self.path.exists():
            return PaymentConfig()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.logger.warning(f"Could not read {self.path}, using defaults: {exc}")
            return PaymentConfig()
        return PaymentConfig.model_validate(raw)

    def save(self, config: PaymentConfig) -> SaveReport:
        report = SaveReport()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(config.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            report.local_saved = True
        except OSError as exc:
            self.logger.warning(f"Local payment config not saved: {exc}")
            report.errors.append(f"Local: {exc}")

        try:
            self.data.save_payment_config(config)
            report.backend_saved = True
        except AdminApiError as exc:
            self.logger.warning(f"Backend payment config not saved: {exc.message}")
            report.errors.append(f"Servidor: {exc.message}")

        return report
