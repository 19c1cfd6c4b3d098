from setuptools import setup, find_packages

setup(
    name="ads-monitor",
    version="0.1.0",
    description="Anomaly monitoring and alerting for Google Ads accounts",
    author="Ads Monitor Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "click>=8.1.7",
        "rich>=13.7.0",

        # HTTP & Auth
        "httpx>=0.25.2",
        "aiohttp>=3.9.1",
        "tenacity>=8.2.3",
        "cryptography>=41.0.7",

        # Database
        "sqlalchemy>=2.0.23",

        # Data Processing
        "pydantic>=2.5.0",
        "python-dateutil>=2.8.2",

        # Utilities
        "pyyaml>=6.0.1",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "ads-monitor=ads_monitor.cli.main:main",
        ],
    },
)
