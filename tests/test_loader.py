import pandas as pd
import pytest

from community_crime.config import PipelineConfig
from community_crime.loader import load_census_table, load_crime_table, load_inputs
from community_crime.utils.exceptions import LoadError

from conftest import write_csv


class TestCrimeTable:
    def test_loads_headers_verbatim(self, crime_csv):
        df = load_crime_table(crime_csv)
        assert list(df.columns) == ['Community', 'Category', '2017/01', '2017/02', '2017/03']
        assert len(df) == 8

    def test_counts_are_nullable_ints(self, crime_csv):
        df = load_crime_table(crime_csv)
        for col in ['2017/01', '2017/02', '2017/03']:
            assert df[col].dtype == 'Int64'

    def test_blank_stays_missing_and_zero_stays_zero(self, crime_csv):
        df = load_crime_table(crime_csv)
        # X / THEFT OF VEHICLE has a blank February; X / ASSAULT has an explicit 0 in March
        assert pd.isna(df.loc[1, '2017/02'])
        assert df.loc[0, '2017/03'] == 0
        assert not pd.isna(df.loc[0, '2017/03'])

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError, match='not found'):
            load_crime_table(tmp_path / 'nope.csv')

    def test_empty_file(self, tmp_path):
        path = write_csv(tmp_path, 'empty.csv', '')
        with pytest.raises(LoadError, match='empty'):
            load_crime_table(path)

    def test_missing_identifier_column(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,2017/01\nX,1\n')
        with pytest.raises(LoadError, match='Category'):
            load_crime_table(path)

    def test_no_month_columns(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category\nX,ASSAULT\n')
        with pytest.raises(LoadError, match='no month columns'):
            load_crime_table(path)

    def test_non_numeric_count_reports_column_and_row(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\nA,ASSAULT,1\nB,ASSAULT,abc\n')
        with pytest.raises(LoadError, match=r"'2017/01' row 2"):
            load_crime_table(path)

    def test_negative_count(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\nA,ASSAULT,-1\n')
        with pytest.raises(LoadError, match='negative'):
            load_crime_table(path)

    def test_fractional_count(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\nA,ASSAULT,1.5\n')
        with pytest.raises(LoadError, match='whole count'):
            load_crime_table(path)

    def test_whitespace_only_cell_is_missing(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\nA,ASSAULT, \n')
        df = load_crime_table(path)
        assert pd.isna(df.loc[0, '2017/01'])

    def test_whitespace_only_community(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\nX,ASSAULT,1\n   ,ASSAULT,1\n')
        with pytest.raises(LoadError, match="'Community' row 2 is blank"):
            load_crime_table(path)

    def test_whitespace_only_category(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\nX,  ,1\n')
        with pytest.raises(LoadError, match="'Category' row 1 is blank"):
            load_crime_table(path)

    def test_infinite_count(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\nX,ASSAULT,inf\n')
        with pytest.raises(LoadError, match='not a finite number'):
            load_crime_table(path)

    def test_blank_community(self, tmp_path):
        path = write_csv(tmp_path, 'c.csv', 'Community,Category,2017/01\n,ASSAULT,1\n')
        with pytest.raises(LoadError, match='row 1 is blank'):
            load_crime_table(path)


class TestCensusTable:
    def test_populations_are_floats(self, census_csv):
        df = load_census_table(census_csv)
        assert list(df.columns) == ['Community', '2012', '2013', '2014', '2015', '2016']
        assert df['2012'].dtype == 'float64'

    def test_community_whitespace_is_stripped(self, census_csv):
        df = load_census_table(census_csv)
        assert 'Downtown' in set(df['Community'])

    def test_selected_year_columns_must_exist(self, census_csv):
        with pytest.raises(LoadError, match='2020'):
            load_census_table(census_csv, year_columns=['2012', '2020'])

    def test_negative_population(self, tmp_path):
        path = write_csv(tmp_path, 'p.csv', 'Community,2016\nA,-5\n')
        with pytest.raises(LoadError, match='negative population'):
            load_census_table(path)

    def test_whitespace_only_community(self, tmp_path):
        path = write_csv(tmp_path, 'p.csv', 'Community,2016\nA,10\n \t ,20\n')
        with pytest.raises(LoadError, match="'Community' row 2 is blank"):
            load_census_table(path)

    @pytest.mark.parametrize('value', ['inf', '-inf', 'Infinity'])
    def test_infinite_population(self, tmp_path, value):
        path = write_csv(tmp_path, 'p.csv', f'Community,2016\nX,{value}\n')
        with pytest.raises(LoadError):
            load_census_table(path)

    def test_fractional_population(self, tmp_path):
        path = write_csv(tmp_path, 'p.csv', 'Community,2015,2016\nX,100,250.5\n')
        with pytest.raises(LoadError, match="'2016' row 1 is not a whole head count"):
            load_census_table(path)

    def test_whole_number_written_as_decimal_is_accepted(self, tmp_path):
        path = write_csv(tmp_path, 'p.csv', 'Community,2016\nX,250.0\n')
        assert load_census_table(path).loc[0, '2016'] == 250.0

    def test_blank_population_is_nan(self, tmp_path):
        path = write_csv(tmp_path, 'p.csv', 'Community,2015,2016\nA,,10\n')
        df = load_census_table(path)
        assert pd.isna(df.loc[0, '2015'])
        assert df.loc[0, '2016'] == 10.0


class TestLoadInputs:
    def test_uses_config_column_names(self, tmp_path):
        crime = write_csv(tmp_path, 'c.csv', 'Area,Type,2017/01\nX,ASSAULT,1\n')
        census = write_csv(tmp_path, 'p.csv', 'Area,2016\nX,10\n')
        config = PipelineConfig(community_column='Area', category_column='Type')
        crime_df, census_df = load_inputs(crime, census, config)
        assert list(crime_df.columns) == ['Area', 'Type', '2017/01']
        assert list(census_df.columns) == ['Area', '2016']
