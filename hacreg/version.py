# hacreg/version.py
"""
hacreg version information

Version metadata and release history. hacreg follows semantic versioning
(MAJOR.MINOR.PATCH).
"""

from typing import Any, Dict

# Version components
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

# Full version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Package metadata
__title__ = "hacreg"
__description__ = "HAC-robust regression inference and residual bootstrap"
__license__ = "MIT"

# Python version requirements
__python_requires__ = ">=3.10"

# Package dependencies
__dependencies__ = {
    "numpy": ">=1.26.0",
    "scipy": ">=1.11.3",
    "pandas": ">=2.1.1",
    "numba": ">=0.58.0",
    "statsmodels": ">=0.14.0",
    "matplotlib": ">=3.8.0",
}

# Version history with release dates and major changes
VERSION_HISTORY = [
    {
        "version": "1.0.0",
        "release_date": "2026-10-19",
        "changes": [
            "OLS with classical, White and Newey-West covariance",
            "Seemingly unrelated regressions with a shared regressor matrix and Wald tests",
            "i.i.d. and circular block residual bootstrap with reproducible draws",
        ]
    },
]


def get_version_info() -> Dict[str, Any]:
    """
    Get detailed version information.

    Returns:
        Dict containing the version string, its components, release date,
        recent changes and dependencies.
    """
    current_version = VERSION_HISTORY[0]

    return {
        "version": __version__,
        "major": VERSION_MAJOR,
        "minor": VERSION_MINOR,
        "patch": VERSION_PATCH,
        "release_date": current_version["release_date"],
        "changes": current_version["changes"],
        "python_requires": __python_requires__,
        "dependencies": __dependencies__,
        "license": __license__
    }

