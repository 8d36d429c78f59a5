from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from pipeline.io import files
from processes.config import load_config
from processes.errors import JobIOError
from processes.job import context
from processes.job.models import Argument
from processes.params.resolver import load_params, merge


@pytest.fixture
def draft(write_config, write_params, vcf_file):
    config = load_config(write_config())
    params = load_params(
        write_params(
            {
                "projectdir": "out/myproject",
                "bff": {"metadatadir": "meta"},
                "pipeline": {"vcf2bff": True, "bff2html": True},
            }
        )
    )
    arg = Argument(mode="vcf", inputfile="sample.vcf.gz")
    return merge(config, params, arg)


def test_build_creates_project_dir(draft, tmp_path: Path):
    desc = context.build(draft, job_id="20250101_000000_abcdef12")
    project = tmp_path / "out" / "myproject_20250101_000000_abcdef12"

    assert desc.projectdir == str(project.resolve())
    assert project.is_dir()
    assert desc.log == str(project.resolve() / "log.json")
    assert desc.jobid == "20250101_000000_abcdef12"


def test_build_is_idempotent_on_existing_dir(draft, tmp_path: Path):
    project = tmp_path / "out" / "myproject_job1"
    project.mkdir(parents=True)
    (project / "keep.txt").write_text("x", encoding="utf-8")
    before = sorted(p.name for p in project.iterdir())

    context.build(draft, job_id="job1")
    context.build(draft, job_id="job1")

    assert sorted(p.name for p in project.iterdir()) == before


def test_paths_are_absolute(draft, tmp_path: Path):
    desc = context.build(draft, job_id="job2")

    assert desc.inputfile == str((tmp_path / "sample.vcf.gz").resolve())
    assert Path(desc.bff.metadatadir) == (tmp_path / "meta").resolve()
    assert Path(desc.bff.analyses) == (tmp_path / "meta" / "analyses.json").resolve()
    assert Path(desc.programs.vcf2bff).is_absolute()
    assert desc.programs.bff2mongodb is None
    assert Path(desc.workdirs.vcf2bff) == Path(desc.projectdir) / "vcf"
    assert Path(desc.workdirs.bff2html) == Path(desc.projectdir) / "browser"
    # vcf2bff writes the genomic variations document consumed downstream
    assert Path(desc.gvvcfjson) == Path(desc.projectdir) / "vcf" / "genomicVariationsVcf.json.gz"


def test_gvvcfjson_from_metadatadir_without_vcf2bff(write_config, write_params, tmp_path: Path):
    config = load_config(write_config())
    params = load_params(write_params({"pipeline": {"bff2mongodb": True}}))
    desc = context.build(merge(config, params, Argument(mode="mongodb")), job_id="job3")
    assert Path(desc.gvvcfjson) == (tmp_path / "genomicVariationsVcf.json.gz").resolve()


def test_job_ids_are_distinct(draft):
    a = context.build(draft, create_dir=False)
    b = context.build(draft, create_dir=False)
    assert a.jobid != b.jobid
    assert a.projectdir != b.projectdir


def test_info_build_creates_nothing(draft, tmp_path: Path):
    desc = context.build(draft, job_id="job4", create_dir=False)
    assert not Path(desc.projectdir).exists()
    assert not (tmp_path / "out").exists()


def test_descriptor_is_immutable(draft):
    desc = context.build(draft, job_id="job5", create_dir=False)
    with pytest.raises(ValidationError):
        desc.genome = "hg38"  # type: ignore[misc]
    with pytest.raises(ValidationError):
        desc.pipeline.bff2mongodb = True  # type: ignore[misc]
    assert desc.pipeline["vcf2bff"] is True


def test_directory_failure_is_job_io_error(draft, monkeypatch):
    def _boom(path: Path) -> None:
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(context, "ensure_dir", _boom)
    with pytest.raises(JobIOError) as ei:
        context.build(draft, job_id="job6")
    assert isinstance(ei.value, OSError)
    assert isinstance(ei.value.__cause__, PermissionError)


def test_ensure_dir_twice_is_noop(tmp_path: Path):
    target = tmp_path / "a" / "b"
    files.ensure_dir(target)
    files.ensure_dir(target)
    assert target.is_dir()


def test_relative_tmpdir_is_absolute(write_config, write_params, tmp_path: Path):
    config = load_config(write_config())
    params = load_params(write_params({"tmpdir": "scratch"}))
    desc = context.build(merge(config, params, Argument(mode="mongodb")), job_id="tmp")

    assert desc.tmpdir == str((tmp_path / "scratch").resolve())
