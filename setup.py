from setuptools import setup, find_packages

# Core requirements
INSTALL_REQUIRES = [
    "aiohttp>=3.9.1",
    "python-dotenv>=1.0.0",
    "chardet>=4.0.0",
    "cachetools>=5.3.2",
    "structlog>=23.2.0",
    "prometheus-client>=0.17.1",
    "feedparser>=6.0.0",
    "click>=8.0.0",
    "beautifulsoup4>=4.12.0",
    "markdownify>=0.13.1",
    "Markdown>=3.5",
]

# Development requirements
EXTRAS_REQUIRE = {
    "dev": [
        "pytest>=7.4.3",
        "pytest-cov>=4.1.0",
        "pytest-mock>=3.12.0",
        "pytest-asyncio>=0.23.2",
        "black>=23.11.0",
        "flake8>=6.1.0",
        "mypy>=1.7.1",
        "isort>=5.12.0",
        "pre-commit>=3.5.0",
        "types-cachetools>=5.3.0",
        "types-Markdown>=3.5.0",
    ],
    "test": [
        "pytest>=7.4.3",
        "pytest-cov>=4.1.0",
        "pytest-mock>=3.12.0",
        "pytest-asyncio>=0.23.2",
    ],
}

setup(
    name="full_feed",
    version="1.0.0",
    description="RSS proxy that replaces feed summaries with the full content of each article",
    long_description=open("README.md", "r", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests*", "docs*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: News/Diary",
    ],
    python_requires=">=3.10",
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    entry_points={
        "console_scripts": [
            "full-feed=full_feed.cli:cli",
        ],
    },
)
