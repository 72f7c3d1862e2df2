from setuptools import setup, find_packages

setup(
    name         = 'chargemerge',
    version      = '1.0',
    packages     = find_packages(exclude=['tests', 'tests.*']),
    python_requires = '>=3.11',
    install_requires = [
        'geojson',
        'geopy',
        'requests',
        'scrapy',
        'shapely',
    ],
    extras_require = {
        'test': ['pytest'],
    },
    entry_points = {'scrapy': ['settings = scrapers.settings']},
    include_package_data = True
)
