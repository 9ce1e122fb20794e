"""
Configuration management subsystem.

Static vs Dynamic Configuration
--------------------------------
**Static (Config):**
- Loaded from environment variables at startup (.env support)
- Includes: environment, log settings, database URL
- Changes require a restart or `Config.reload()`

**Dynamic (ConfigManager):**
- Built-in defaults merged with YAML files from CONFIG_DIR
- Includes: staking APR and daily limit, fee split, leaderboard paging
- Runtime overrides with `set`

Usage
-----
```python
from voidcore.core.config import Config, ConfigManager

if Config.is_production():
    ...

config = ConfigManager()
config.initialize()
apr = config.get("staking.default_apr", 5.0)
```
"""

from voidcore.core.config.config import Config, Environment
from voidcore.core.config.manager import ConfigManager

__all__ = [
    "Config",
    "Environment",
    "ConfigManager",
]
