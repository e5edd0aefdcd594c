from __future__ import annotations

from pathlib import Path
from setuptools import find_packages, setup

BASE_DIR = Path(__file__).parent
README = (BASE_DIR / "readme.md").read_text(encoding="utf-8") if (BASE_DIR / "readme.md").exists() else ""

setup(
    name="tallycheck",
    version="0.1.0",
    description="Session lifecycle and attendance verification engine for the TallyCheck dashboard.",
    long_description=README,
    long_description_content_type="text/markdown",
    author="TallyCheck",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"tallycheck.data": ["migrations/*.sql"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "python-dotenv>=1.0.0",
        "qrcode>=7.4",
        "Pillow>=10.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
        ]
    },
)
