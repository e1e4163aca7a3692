import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


CRIME_CSV = """Community,Category,2017/01,2017/02,2017/03
X,ASSAULT,2,3,0
X,THEFT OF VEHICLE,5,,10
Beltline,ASSAULT,10,20,30
Beltline,SOCIAL DISORDER,40,,50
downtown,ASSAULT,100,200,300
Ghost Town,ASSAULT,1,1,1
Empty,ASSAULT,0,0,0
Riverside,ASSAULT,30,30,40
"""

CENSUS_CSV = """Community,2012,2013,2014,2015,2016
X,100,100,100,100,100
BELTLINE,1000,1000,1000,1000,1000
Downtown ,100,100,100,100,100
Empty,0,0,0,0,0
Riverside,600,600,600,600,600
Bigtown,600,600,600,600,600
"""


def write_csv(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text)
    return path


@pytest.fixture
def crime_csv(tmp_path):
    return write_csv(tmp_path, 'crime.csv', CRIME_CSV)


@pytest.fixture
def census_csv(tmp_path):
    return write_csv(tmp_path, 'census.csv', CENSUS_CSV)
