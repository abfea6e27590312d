from setuptools import setup, find_packages

setup(
    name             = 'safedate',
    version          = '1.0.0',
    description      = 'safedate: dating conversation safety and interest scoring',
    author           = 'safedate contributors',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest>=7', 'httpx'],
    },
    entry_points     = {
        'console_scripts': [
            'safedate = safedate.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
