# type: ignore
import logging
from typing import List  # noqa
from typing import Tuple  # noqa

from riot import Venv


logger = logging.getLogger(__name__)
latest = ""


SUPPORTED_PYTHON_VERSIONS: List[Tuple[int, int]] = [
    (3, 8),
    (3, 9),
    (3, 10),
    (3, 11),
    (3, 12),
]  # type: List[Tuple[int, int]]


def version_to_str(version: Tuple[int, int]) -> str:
    """Convert a Python version tuple to a string

    >>> version_to_str((3, 8))
    '3.8'
    >>> version_to_str((3, ))
    '3'
    """
    return ".".join(str(p) for p in version)


def str_to_version(version: str) -> Tuple[int, int]:
    """Convert a Python version string to a tuple

    >>> str_to_version("3.10")
    (3, 10)
    >>> str_to_version("3")
    (3,)
    """
    return tuple(int(p) for p in version.split("."))


MIN_PYTHON_VERSION = version_to_str(min(SUPPORTED_PYTHON_VERSIONS))
MAX_PYTHON_VERSION = version_to_str(max(SUPPORTED_PYTHON_VERSIONS))


def select_pys(min_version: str = MIN_PYTHON_VERSION, max_version: str = MAX_PYTHON_VERSION) -> List[str]:
    """Helper to select python versions from the list of versions we support

    >>> select_pys()
    ['3.8', '3.9', '3.10', '3.11', '3.12']
    >>> select_pys(min_version='3.8', max_version='3.9')
    ['3.8', '3.9']
    """
    min_version = str_to_version(min_version)
    max_version = str_to_version(max_version)

    return [version_to_str(version) for version in SUPPORTED_PYTHON_VERSIONS if min_version <= version <= max_version]


venv = Venv(
    pkgs={
        "pytest": latest,
        "pytest-randomly": latest,
        "requests-mock": ">=1.4",
    },
    env={
        "JCW_LOGGING_RATE": "0",
    },
    venvs=[
        Venv(
            name="jcw",
            command="pytest {cmdargs} --ignore=tests/contrib tests/",
            pys=select_pys(),
            pkgs={
                "flask": latest,
            },
        ),
        Venv(
            name="flask",
            command="pytest {cmdargs} tests/contrib/flask",
            pys=select_pys(),
            venvs=[
                Venv(pkgs={"flask": "~=2.3"}),
                Venv(pkgs={"flask": "~=3.0"}),
            ],
        ),
        Venv(
            name="requests",
            command="pytest {cmdargs} tests/contrib/requests",
            pys=select_pys(),
            pkgs={
                "requests": ["~=2.22.0", latest],
            },
        ),
        Venv(
            name="sqlalchemy",
            command="pytest {cmdargs} tests/contrib/sqlalchemy",
            pys=select_pys(),
            pkgs={
                "sqlalchemy": ["~=1.4.0", "~=2.0.0"],
            },
        ),
        Venv(
            name="peewee",
            command="pytest {cmdargs} tests/contrib/peewee",
            pys=select_pys(),
            pkgs={
                "peewee": ["~=3.14.0", latest],
            },
        ),
    ],
)
