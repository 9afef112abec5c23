"""
purgelapse - Object Lifecycle Time-Lapse
Replay partitioned delete/expire logs into numbered state snapshots
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="purgelapse",
    version="0.1.0",
    description="Replay object lifecycle event logs into a time-lapse of aggregate state",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["purgelapse", "purgelapse.*"]),
    python_requires=">=3.10",
    install_requires=[
        # Core dependencies
        "numpy>=1.26.4",

        # Rendering
        "pillow>=11.3.0",
        "opencv-python>=4.7.0",

        # CLI/UI
        "rich>=14.1.0",
        "tqdm>=4.67.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=23.0.0",
            "ruff>=0.13.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "purgelapse=purgelapse.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Topic :: Multimedia :: Graphics",
        "Topic :: System :: Archiving",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
