from setuptools import find_packages, setup

setup(
    name="unified-ftp",
    version="0.1.0",
    description="One client for FTP and SFTP file operations",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "paramiko>=3.0.0",
    ],
    entry_points={
        "console_scripts": [
            "unified-ftp=unified_ftp.__main__:main",
        ],
    },
    python_requires=">=3.10",
    extras_require={
        "dev": [
            "pytest",
            "pyftpdlib",
            "build",
            "twine",
        ],
    },
)
