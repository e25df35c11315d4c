from setuptools import setup, find_packages

setup(
    name='crab',
    version='0.1.0',
    description='A local command-line credential manager',
    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    python_requires='>=3.8',
    install_requires=[
        'click>=8.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'crab=crab.cli.commands:main',
        ],
    },
)
