from setuptools import setup, find_packages

setup(
    name="commentguard",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "telethon>=1.34.0",
        "pyyaml>=6.0",
        "python-dotenv>=1.0.0",
        "httpx>=0.27.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "commentguard=commentguard.cli:main",
        ],
    },
)
