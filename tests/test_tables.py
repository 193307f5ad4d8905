import pytest

from gfftab.base import GFeature, GId, Rank
from gfftab.config import GConfig
from gfftab.tables import GTables, GTsvTables, FEATURE_COLUMNS


def exon(uid, aid='e1', end=200):
    return GFeature(
        chr='chr1', src='test', feature_type='exon', start=100, end=end,
        strand='-', frame=0, rank=Rank.EXON, gid=GId(uid=uid, aid=aid, paid='t1', puid=3)
    )


class TestGTables:
    def test_frames(self):
        tables = GTables()
        tables.write_feature(exon(1), 2)
        tables.write_link(exon(1), 3, -1)
        frames = tables.frames()
        assert set(frames) == {
            'region', 'gene', 'rna', 'exon', 'cds', 'tr_exon', 'tr_cds', 'tr_annotation'
        }
        assert list(frames['exon'].columns) == FEATURE_COLUMNS
        assert list(frames['exon'].iloc[0]) == [
            1, 3, 2, 'exon', 'e1', 'chr1', 't1', 'test', 100, 200, '-', 0
        ]
        assert list(frames['tr_exon'].iloc[0]) == [3, 1, -1, 'e1']
        assert frames['cds'].empty
        assert tables.n_rows['exon'] == 1

    def test_annotation_rows(self):
        tables = GTables()
        f = exon(4)
        f.annotation = {3: {'b', 'a'}, 1: {'x'}}
        tables.write_annotation(f)
        assert tables.rows['annotation'] == [(4, 1, 'x'), (4, 3, 'a'), (4, 3, 'b')]

    def test_renamed_tables(self):
        config = GConfig(table_names={**GConfig().table_names, 'rna': 'transcript'})
        frames = GTables(config).frames()
        assert 'transcript' in frames and 'rna' not in frames


class TestGTsvTables:
    def test_files(self, tmp_path):
        prefix = str(tmp_path / 'out')
        tables = GTsvTables(prefix, GConfig(chunk_size=1))
        tables.write_feature(exon(1), 2)
        tables.write_feature(exon(2, 'e2', end=None), 2)
        tables.write_link(exon(1), 3, 1)
        tables.close()

        names = sorted(p.name for p in tmp_path.iterdir())
        assert names == sorted(f'out_{n}.tsv' for n in (
            'region', 'gene', 'rna', 'exon', 'cds', 'tr_exon', 'tr_cds', 'tr_annotation'
        ))
        assert (tmp_path / 'out_exon.tsv').read_text().splitlines() == [
            '1\t3\t2\texon\te1\tchr1\tt1\ttest\t100\t200\t-\t0',
            '2\t3\t2\texon\te2\tchr1\tt1\ttest\t100\t.\t-\t0',
        ]
        assert (tmp_path / 'out_tr_exon.tsv').read_text() == '3\t1\t1\te1\n'
        assert (tmp_path / 'out_cds.tsv').read_text() == ''

    def test_header(self, tmp_path):
        prefix = str(tmp_path / 'out')
        tables = GTsvTables(prefix, GConfig(header=True, chunk_size=1))
        tables.write_link(exon(1), 3, 1)
        tables.write_link(exon(2, 'e2'), 3, 2)
        tables.close()
        assert (tmp_path / 'out_tr_exon.tsv').read_text().splitlines() == [
            'parent_key\tchild_key\tcount\tchild_id',
            '3\t1\t1\te1',
            '3\t2\t2\te2',
        ]
        assert (tmp_path / 'out_tr_cds.tsv').read_text().splitlines() == [
            'parent_key\tchild_key\tcount\tchild_id'
        ]

    def test_close_twice(self, tmp_path):
        tables = GTsvTables(str(tmp_path / 'out'))
        tables.write_feature(exon(1), 1)
        tables.close()
        tables.close()
        assert len((tmp_path / 'out_exon.tsv').read_text().splitlines()) == 1

    def test_unwritable_prefix(self, tmp_path):
        with pytest.raises(OSError):
            GTsvTables(str(tmp_path / 'missing' / 'out'))
