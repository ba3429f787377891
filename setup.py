from setuptools import setup

package_name = 'pf_localizer'

setup(
    name=package_name,
    version='0.1.0',
    packages=[package_name],
    install_requires=[
        'setuptools',
        'numpy',
        'scipy',
        'matplotlib',
    ],
    extras_require={
        'test': ['pytest'],
    },
    python_requires='>=3.8',
    zip_safe=True,
    maintainer='armaanm',
    maintainer_email='armaanmahajanbg@gmail.com',
    description='Monte Carlo localization against a known landmark map',
    license='MIT',
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'pf_sim = pf_localizer.sim:main',
            'pf_plot = pf_localizer.viz:main',
        ],
    },
)
