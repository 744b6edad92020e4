from pathlib import Path
import re

from setuptools import find_packages
from setuptools import setup


HERE = Path(__file__).resolve().parent


def get_version():
    # type: () -> str
    content = (HERE / "jcw" / "_version.py").read_text()
    match = re.search(r'^__version__ = "([^"]+)"', content, re.MULTILINE)
    if match is None:
        raise RuntimeError("Unable to find the version string in jcw/_version.py")
    return match.group(1)


setup(
    name="jaeger-client-wrapper",
    version=get_version(),
    description="Jaeger tracing for Flask applications",
    long_description=(HERE / "README.md").read_text(),
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(exclude=["tests*"]),
    python_requires=">=3.8",
    zip_safe=False,
    install_requires=[
        "attrs>=20.1",
        "blinker>=1.6",
        "envier~=0.6",
        "flask>=2.3",
        "jaeger-client>=4.8",
        "opentracing>=2.4,<3",
        "requests>=2.22",
        "thrift",
        "wrapt>=1.14",
    ],
    extras_require={
        "sqlalchemy": ["sqlalchemy>=1.4"],
        "peewee": ["peewee>=3.14"],
        "test": [
            "peewee>=3.14",
            "pytest",
            "pytest-randomly",
            "requests-mock>=1.4",
            "sqlalchemy>=1.4",
        ],
    },
    classifiers=[
        "Framework :: Flask",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Monitoring",
    ],
)
