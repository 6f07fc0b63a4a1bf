from setuptools import setup, find_packages

setup(
    name='prediction-amm-quotes',
    version='0.1.0',
    packages=find_packages(include=['amm_quotes', 'amm_quotes.*']),
    install_requires=[
        'mpmath',
        'numpy',
        'python-dotenv',
        'typing_extensions',
    ],
    extras_require={
        'test': ['pytest'],
    },
    description='Deterministic quote engine for YES/NO constant-product prediction market pools: prices, swaps, liquidity and unit conversion.',
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.10',
)
