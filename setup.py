from setuptools import setup, find_packages

setup(
    name="planning-relay",
    version="0.1.0",
    description="HTTP relay that emails rendered plannings to a list of recipients over SMTP",
    author="",
    author_email="",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "Flask[async]>=2.2.0",
        "aiosmtplib>=2.0.0",
        "email-validator>=2.0.0",
        "python-dotenv>=0.19.0",
        "click>=8.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "PyYAML>=5.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "planning-relay=planning_relay.cli:main",
        ],
    },
)
