"""Top-level package for the ConstruCost budget dashboard.

The primary modules are:

* ``repository`` – budget collection CRUD, statistics and settings record
* ``form_session`` – the create/edit draft lifecycle
* ``extraction`` / ``image_editing`` – hosted AI collaborators
* ``Home.py`` and ``pages/`` – the Streamlit multi-page app

To run the dashboard from the command line you can execute:

```bash
python run_dashboard.py
```
"""

from .models import AppSettings, AttachedFile, Budget, BudgetStatus, DashboardStats  # noqa: F401
from .repository import BudgetRepository, SettingsRepository  # noqa: F401

__all__ = [
    "AppSettings",
    "AttachedFile",
    "Budget",
    "BudgetStatus",
    "DashboardStats",
    "BudgetRepository",
    "SettingsRepository",
]
