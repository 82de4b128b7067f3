from setuptools import setup, find_packages
setup(
    name="listing_aggregator",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "pydantic>=2",
        "httpx",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'listing_aggregator=listing_aggregator.__main__:_safe_main'
        ]
    }
)
