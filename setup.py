from setuptools import setup, find_packages

setup(
    name="ups-diff",
    version="1.0.0",
    packages=find_packages(include=["ups", "ups.*"]),
    install_requires=[
        "g4f",
        "rich",
    ],
    extras_require={
        "test": [
            "pytest",
            "GitPython",
        ],
    },
    entry_points={
        'console_scripts': [
            'ups-diff=ups.cli:main_cli',
        ],
    },
    author="Uwayss",
    author_email="",
    description="Generate commit messages from your git diff, then commit and push",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    url="",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Version Control :: Git",
    ],
    python_requires=">=3.9",
)
