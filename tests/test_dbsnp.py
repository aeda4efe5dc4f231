"""Tests for dbSNP variant normalization and import."""

import pytest
from fixtures.records import RecordingStore, dbsnp_record
from fixtures.vcf_generator import (
    SyntheticVariant,
    make_dbsnp_vcf_file,
    make_truncated_dbsnp_vcf_file,
)

from genobase_importer.config import ImportConfig
from genobase_importer.dbsnp import VariantNormalizer, import_dbsnp
from genobase_importer.exceptions import (
    FieldMissingError,
    InvalidVariantIdError,
    SourceOpenError,
    StoreError,
)
from genobase_importer.models import Variant


@pytest.fixture
def normalizer():
    return VariantNormalizer()


class TestVariantNormalizer:
    """Unit tests for VariantNormalizer.normalize."""

    def test_common_snv(self, normalizer):
        variant = normalizer.normalize(dbsnp_record(rs_id="rs12345"))

        assert variant == Variant(
            id=12345,
            chromosome="1",
            position=100_000,
            reference="A",
            variant_class="SNV",
        )

    def test_not_common_is_dropped(self, normalizer):
        assert normalizer.normalize(dbsnp_record(common=False)) is None

    def test_mnv_is_dropped(self, normalizer):
        assert normalizer.normalize(dbsnp_record(variant_class="MNV")) is None

    def test_mnv_dropped_even_when_not_filtering_commonness(self):
        normalizer = VariantNormalizer(common_only=False)
        assert normalizer.normalize(dbsnp_record(common=False, variant_class="MNV")) is None

    def test_uncommon_kept_when_not_filtering_commonness(self):
        normalizer = VariantNormalizer(common_only=False)
        variant = normalizer.normalize(dbsnp_record(common=False))
        assert variant is not None
        assert variant.id == 12345

    @pytest.mark.parametrize("variant_class", ["INS", "DEL", "INDEL"])
    def test_other_classes_kept(self, normalizer, variant_class):
        variant = normalizer.normalize(dbsnp_record(variant_class=variant_class))
        assert variant.variant_class == variant_class

    @pytest.mark.parametrize(
        "rs_id", ["rsABC", "rs", "12345", "rs12a", "rs99999999999999999999", None]
    )
    def test_malformed_id_is_fatal(self, normalizer, rs_id):
        with pytest.raises(InvalidVariantIdError):
            normalizer.normalize(dbsnp_record(rs_id=rs_id))

    def test_malformed_id_on_dropped_record_is_not_checked(self, normalizer):
        assert normalizer.normalize(dbsnp_record(rs_id="rsABC", common=False)) is None

    def test_missing_variant_class_is_fatal(self, normalizer):
        record = dbsnp_record()
        del record.INFO["VC"]
        with pytest.raises(FieldMissingError):
            normalizer.normalize(record)

    def test_unresolved_contig_is_dropped(self, normalizer):
        assert normalizer.normalize(dbsnp_record(chrom="NT_187361.1")) is None

    def test_x_par_is_relabelled(self, normalizer):
        variant = normalizer.normalize(dbsnp_record(chrom="NC_000023.11", pos=60_000))
        assert variant.chromosome == "PAR"
        assert variant.position == 60_000

    def test_x_par2_is_relabelled(self, normalizer):
        variant = normalizer.normalize(dbsnp_record(chrom="NC_000023.11", pos=156_000_000))
        assert variant.chromosome == "PAR2"
        assert variant.position == 156_000_000

    def test_y_par_is_dropped(self, normalizer):
        assert normalizer.normalize(dbsnp_record(chrom="NC_000024.10", pos=60_000)) is None

    def test_x_outside_par_unchanged(self, normalizer):
        variant = normalizer.normalize(dbsnp_record(chrom="NC_000023.11", pos=5_000_000))
        assert variant.chromosome == "X"

    def test_mitochondrial(self, normalizer):
        variant = normalizer.normalize(dbsnp_record(chrom="NC_012920.1", pos=3_308))
        assert variant.chromosome == "MT"


class TestImportDbsnp:
    """Tests for import_dbsnp over a synthetic dbSNP VCF."""

    async def test_import_filters_and_normalizes(self, recording_store):
        vcf_file = make_dbsnp_vcf_file([
            SyntheticVariant("NC_000001.11", 10_177, "A", ["AC"], rs_id="rs367896724",
                             info={"COMMON": True, "VC": "INS"}),
            SyntheticVariant("NC_000001.11", 10_352, "T", ["TA"], rs_id="rs555500075",
                             info={"VC": "INS"}),
            SyntheticVariant("NC_000001.11", 10_500, "AT", ["GC"], rs_id="rs11111",
                             info={"COMMON": True, "VC": "MNV"}),
            SyntheticVariant("NT_187361.1", 500, "G", ["A"], rs_id="rs22222",
                             info={"COMMON": True, "VC": "SNV"}),
            SyntheticVariant("NC_000023.11", 60_000, "C", ["T"], rs_id="rs33333",
                             info={"COMMON": True, "VC": "SNV"}),
            SyntheticVariant("NC_000024.10", 60_000, "C", ["T"], rs_id="rs33334",
                             info={"COMMON": True, "VC": "SNV"}),
            SyntheticVariant("NC_012920.1", 3_308, "T", ["C"], rs_id="rs28358582",
                             info={"COMMON": True, "VC": "SNV"}),
        ])
        try:
            result = await import_dbsnp(recording_store, vcf_file)
        finally:
            vcf_file.unlink()

        assert result["records_read"] == 7
        assert result["records_skipped"] == 4
        assert result["variants_stored"] == 3
        assert result["batches_flushed"] == 1

        assert recording_store.stored == [
            Variant(367896724, "1", 10_177, "A", "INS"),
            Variant(33333, "PAR", 60_000, "C", "SNV"),
            Variant(28358582, "MT", 3_308, "T", "SNV"),
        ]

    async def test_import_batches(self):
        store = RecordingStore()
        vcf_file = make_dbsnp_vcf_file([
            SyntheticVariant("NC_000001.11", 1_000 + i, "A", ["G"], rs_id=f"rs{i + 1}",
                             info={"COMMON": True, "VC": "SNV"})
            for i in range(25)
        ])
        try:
            result = await import_dbsnp(store, vcf_file, ImportConfig(batch_size=10))
        finally:
            vcf_file.unlink()

        assert [len(b) for b in store.batches] == [10, 10, 5]
        assert [v.id for v in store.stored] == list(range(1, 26))
        assert result["batches_flushed"] == 3

    async def test_malformed_id_aborts_after_flushed_batches(self):
        store = RecordingStore()
        variants = [
            SyntheticVariant("NC_000001.11", 1_000 + i, "A", ["G"], rs_id=f"rs{i + 1}",
                             info={"COMMON": True, "VC": "SNV"})
            for i in range(15)
        ]
        variants.append(
            SyntheticVariant("NC_000001.11", 5_000, "A", ["G"], rs_id="rsABC",
                             info={"COMMON": True, "VC": "SNV"})
        )
        vcf_file = make_dbsnp_vcf_file(variants)
        try:
            with pytest.raises(InvalidVariantIdError):
                await import_dbsnp(store, vcf_file, ImportConfig(batch_size=10))
        finally:
            vcf_file.unlink()

        assert len(store.stored) == 10

    async def test_store_failure_aborts(self):
        store = RecordingStore(fail_on_call=2)
        vcf_file = make_dbsnp_vcf_file([
            SyntheticVariant("NC_000001.11", 1_000 + i, "A", ["G"], rs_id=f"rs{i + 1}",
                             info={"COMMON": True, "VC": "SNV"})
            for i in range(25)
        ])
        try:
            with pytest.raises(StoreError):
                await import_dbsnp(store, vcf_file, ImportConfig(batch_size=10))
        finally:
            vcf_file.unlink()

        assert len(store.stored) == 10

    async def test_progress_reports_final_count(self, recording_store):
        seen = []
        vcf_file = make_dbsnp_vcf_file([
            SyntheticVariant("NC_000001.11", 1_000, "A", ["G"], rs_id="rs1",
                             info={"COMMON": True, "VC": "SNV"}),
            SyntheticVariant("NC_000001.11", 1_001, "A", ["G"], rs_id="rs2",
                             info={"VC": "SNV"}),
        ])
        try:
            await import_dbsnp(recording_store, vcf_file, progress=seen.append)
        finally:
            vcf_file.unlink()

        assert seen == [2]

    async def test_missing_file(self, recording_store, tmp_path):
        with pytest.raises(SourceOpenError):
            await import_dbsnp(recording_store, tmp_path / "missing.vcf.gz")

    async def test_truncated_file(self, recording_store):
        vcf_file = make_truncated_dbsnp_vcf_file()
        try:
            with pytest.raises(SourceOpenError, match="Could not read"):
                await import_dbsnp(recording_store, vcf_file)
        finally:
            vcf_file.unlink()
