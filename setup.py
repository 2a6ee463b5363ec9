"""Setup configuration for stravacli package."""
from setuptools import setup, find_packages
from pathlib import Path

# Read README
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="stravacli",
    version="0.1.0",
    author="stravacli Contributors",
    description="Bulk download, create, update and upload Strava activities using CSV files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/stravacli",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "pandas>=2.0.0",
        "python-dateutil>=2.8.0",
        "python-dotenv>=1.0.0",
        "requests>=2.31.0",
        "requests-oauthlib>=1.3.0",
        "oauthlib>=3.2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.0.0",
            "pytest-mock>=3.0.0",
            "flake8>=7.0.0",
            "black>=24.0.0",
            "mypy>=1.8.0",
            "isort>=5.13.0",
            "pylint>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "stravacli=stravacli.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "Environment :: Console",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    keywords="strava csv fitness activities bulk upload",
)
