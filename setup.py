"""Install the cookie session store package."""

from setuptools import setup, find_packages

setup(
    name='cookiejar-sessions',
    version='0.1.0',
    packages=find_packages('.', include=['cookiejar', 'cookiejar.*'],
                           exclude=['*test*']),
    python_requires='>=3.8',
    install_requires=[
        "cryptography",
        "flask>=2.3",
        "python-dateutil",
        "python-json-logger",
        "pytz",
        "werkzeug>=2.3",
    ],
    extras_require={
        'test': [
            "hypothesis",
            "pytest",
        ]
    },
    zip_safe=False
)
