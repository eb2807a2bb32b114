"""
Command-line interface for DigestLab.

DigestLab: restriction digestion and DNA construct editing
"""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import WorkbenchConfig, is_dna_sequence, parse_sequence_input, resolve_enzymes


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _load_workbench(config, enzyme_file):
    """Configuration and active enzyme panel for a command."""
    try:
        settings = WorkbenchConfig.from_yaml(Path(config)) if config else WorkbenchConfig()
        if enzyme_file:
            settings.enzyme_file = Path(enzyme_file)
        panel = settings.load_enzymes()
    except ValueError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)
    return settings, panel


def _output_path(settings, output):
    """Resolve an output option against the configured output directory."""
    path = Path(output)
    if not path.is_absolute():
        path = settings.output_dir / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _split_names(values):
    """Enzyme names from repeated and/or comma-separated options."""
    return [name for value in values for name in value.split(',') if name.strip()]


def _select_enzymes(names, panel):
    try:
        return resolve_enzymes(_split_names(names), panel) if names else list(panel)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _load_sequence(value, label):
    try:
        return parse_sequence_input(value)
    except ValueError as e:
        click.echo(f"Error loading {label}: {e}", err=True)
        sys.exit(1)


def _common_options(f):
    f = click.option('--verbose', is_flag=True, help='Enable debug logging')(f)
    f = click.option('--enzyme-file', type=click.Path(exists=True),
                     help='Enzyme table (TSV or Name;Site;Cut5;Cut3)')(f)
    f = click.option('--config', type=click.Path(exists=True),
                     help='YAML configuration file')(f)
    return f


@click.group()
@click.version_option(version=__version__)
def cli():
    """DigestLab: restriction digestion and DNA construct editing."""
    pass


@cli.command()
@_common_options
def enzymes(config, enzyme_file, verbose):
    """List the active enzyme panel."""
    _setup_logging(verbose)
    _, panel = _load_workbench(config, enzyme_file)

    click.echo(f"{'Enzyme':<10} {'Site':<12} {'Cut5':>4} {'Cut3':>4}  Overhang")
    for enzyme in sorted(panel, key=lambda e: e.name):
        overhang = enzyme.overhang_type.value
        if enzyme.overhang_sequence:
            overhang += f" {enzyme.overhang_sequence}"
        click.echo(
            f"{enzyme.name:<10} {enzyme.recognition_sequence:<12} "
            f"{enzyme.cut_offset_5:>4} {enzyme.cut_offset_3:>4}  {overhang}"
        )
    click.echo(f"\n{len(panel)} enzymes")


@cli.command()
@click.argument('sequence', type=str)
@click.option('--enzyme', '-e', multiple=True,
              help='Enzyme name (repeatable; default: whole panel)')
@click.option('--circular', is_flag=True, help='Treat the sequence as circular')
@click.option('--length', '-l', 'lengths', type=int, multiple=True,
              help='Recognition length to include (repeatable, e.g. -l 6 -l 8)')
@click.option('--overhang', 'overhangs', type=click.Choice(['5', '3', 'blunt']), multiple=True,
              help='End type to include (repeatable)')
@click.option('--palindromic', is_flag=True, help='Only palindromic recognition sites')
@click.option('--cuts', type=click.Choice(['none', 'single', 'multiple']), multiple=True,
              help='Cut-count class to report (repeatable; default: single and multiple)')
@click.option('--output', '-o', type=click.Path(),
              help='Output TSV file')
@_common_options
def sites(sequence, enzyme, circular, lengths, overhangs, palindromic, cuts, output,
          config, enzyme_file, verbose):
    """
    Report restriction sites in SEQUENCE (DNA string or FASTA path).

    \b
    Example:
      digestlab sites pUC19.fasta --circular -e EcoRI -e BamHI
      digestlab sites pUC19.fasta --circular -l 6 --overhang 5 --cuts single
    """
    from .core.cutsites import analyze_enzymes, select_by_cut_count
    from .core.enzymes import filter_enzymes
    from .core.models import OverhangType
    from .io.output import write_cut_sites_tsv

    _setup_logging(verbose)
    settings, panel = _load_workbench(config, enzyme_file)
    selected = filter_enzymes(
        _select_enzymes(enzyme, panel),
        lengths=set(lengths),
        overhang_types={OverhangType.BLUNT if o == 'blunt' else OverhangType(f"{o}'") for o in overhangs},
        palindromic=True if palindromic else None,
    )
    seq = _load_sequence(sequence, 'sequence')

    analyses = analyze_enzymes(seq, selected, circular)
    reported = select_by_cut_count(analyses, cuts or ('single', 'multiple'))
    if cuts:
        analyses = reported

    click.echo(f"\n{len(seq)} bp ({'circular' if circular else 'linear'}), "
               f"{len(selected)} enzyme(s) screened")
    for a in reported:
        positions = ', '.join(str(p) for p in a.positions) or '-'
        click.echo(f"  {a.enzyme.name:<10} {a.cut_count:>3} cut(s): {positions}")
    if not reported:
        click.echo("  No enzymes match the filters" if cuts else "  No cut sites found")

    if output:
        path = write_cut_sites_tsv(analyses, _output_path(settings, output))
        click.echo(f"\nCut sites written to: {path}")


@cli.command()
@click.argument('sequence', type=str)
@click.option('--enzyme', '-e', multiple=True, required=True,
              help='Enzyme name (repeatable for multi-enzyme digests)')
@click.option('--circular', is_flag=True, help='Treat the sequence as circular')
@click.option('--output', '-o', type=click.Path(),
              help='Output FASTA file for fragments')
@_common_options
def digest(sequence, enzyme, circular, output, config, enzyme_file, verbose):
    """
    Digest SEQUENCE (DNA string or FASTA path) and list the fragments.

    \b
    Example:
      digestlab digest pUC19.fasta --circular -e EcoRI,HindIII -o fragments.fa
    """
    from .core.digestion import digest as run_digest
    from .io.output import write_fragments_fasta
    from .utils.sequence import gc_content

    _setup_logging(verbose)
    settings, panel = _load_workbench(config, enzyme_file)
    selected = _select_enzymes(enzyme, panel)
    seq = _load_sequence(sequence, 'sequence')

    fragments = run_digest(seq, selected, circular)

    click.echo(f"\n{len(fragments)} fragment(s) from {len(seq)} bp "
               f"with {', '.join(e.name for e in selected)}:")
    for idx, frag in enumerate(fragments, start=1):
        click.echo(
            f"  {idx:>3}. {frag.size:>7} bp  {frag.start_position}-{frag.end_position}  "
            f"GC {gc_content(frag.sequence) * 100:.1f}%  "
            f"[{frag.end5 or '-'}] .. [{frag.end3 or '-'}]"
        )

    if output:
        path = write_fragments_fasta(fragments, _output_path(settings, output))
        click.echo(f"\nFragments written to: {path}")


@cli.command()
@click.argument('sequence', type=str)
@click.option('--circular', is_flag=True, help='Treat the sequence as circular')
@click.option('--no-mcs', is_flag=True, help='Skip multiple cloning site detection')
@click.option('--output', '-o', type=click.Path(),
              help='Output TSV file for features')
@_common_options
def annotate(sequence, circular, no_mcs, output, config, enzyme_file, verbose):
    """
    Detect promoters, reporters, tags and the MCS in SEQUENCE.

    \b
    Example:
      digestlab annotate pUC19.fasta --circular -o pUC19_features.tsv
    """
    from .core.annotation import auto_annotate
    from .core.models import DnaConstruct
    from .io.output import write_features_tsv

    _setup_logging(verbose)
    settings, panel = _load_workbench(config, enzyme_file)
    seq = _load_sequence(sequence, 'sequence')
    name = "sequence" if is_dna_sequence(sequence.strip()) else Path(sequence).stem

    construct = auto_annotate(
        DnaConstruct(name, seq, is_circular=circular), panel,
        find_mcs=not no_mcs,
        window=settings.mcs_window,
        min_sites=settings.mcs_min_sites,
        padding=settings.mcs_padding,
        min_recognition_length=settings.min_recognition_length,
        allow_ambiguous=settings.allow_ambiguous,
        workers=settings.workers,
    )

    click.echo(f"\n{construct.name}: {construct.length} bp, {len(construct.features)} feature(s)")
    for f in construct.features:
        click.echo(f"  {f.name:<20} {f.feature_type.value:<9} {f.start:>7}-{f.end:<7} {f.strand}")

    if output:
        path = write_features_tsv(construct, _output_path(settings, output))
        click.echo(f"\nFeatures written to: {path}")


def _parse_mcs(value):
    from .core.models import Feature, FeatureType

    try:
        start, end = (int(x) for x in value.split(':'))
        return Feature('MCS', start, end, FeatureType.MCS)
    except ValueError as e:
        click.echo(f"Error: --mcs must be START:END ({e})", err=True)
        sys.exit(1)


@cli.command()
@click.option('--vector', '-v', type=str, required=True,
              help='Vector: DNA sequence or FASTA file path')
@click.option('--insert', '-i', type=str, required=True,
              help='Insert: DNA sequence or FASTA file path')
@click.option('--linear-vector', is_flag=True,
              help='Vector is linear (default: circular)')
@click.option('--circular-insert', is_flag=True,
              help='Insert is circular (default: linear)')
@click.option('--mcs', type=str,
              help='Vector MCS as START:END (default: auto-detect)')
@click.option('--enzyme', '-e', type=str,
              help='Enzyme to clone with (default: top candidate)')
@click.option('--reverse', is_flag=True, help='Insert in reverse orientation')
@click.option('--workers', '-t', type=int,
              help='Worker processes for panel scans (default: from config)')
@click.option('--output', '-o', type=click.Path(),
              help='Output FASTA file for the recombinant')
@click.option('--candidates', type=click.Path(),
              help='Output TSV file for ranked candidates')
@_common_options
def clone(vector, insert, linear_vector, circular_insert, mcs, enzyme, reverse,
          workers, output, candidates, config, enzyme_file, verbose):
    """
    Rank cloning enzymes for VECTOR and INSERT, then build the recombinant.

    \b
    Example:
      digestlab clone -v pUC19.fasta -i gfp.fasta -o pUC19-gfp.fa
    """
    from .core.annotation import auto_annotate
    from .core.cloning import clone_into_vector, select_cloning_sites
    from .core.enzymes import get_enzyme
    from .core.models import DnaConstruct
    from .io.output import write_candidates_tsv, write_construct_fasta
    from .utils.sequence import gc_content

    _setup_logging(verbose)
    settings, panel = _load_workbench(config, enzyme_file)
    n_workers = workers if workers is not None else settings.workers

    vector_seq = _load_sequence(vector, 'vector')
    insert_seq = _load_sequence(insert, 'insert')
    vector_name = "vector" if is_dna_sequence(vector.strip()) else Path(vector).stem
    insert_name = "insert" if is_dna_sequence(insert.strip()) else Path(insert).stem

    vec = DnaConstruct(vector_name, vector_seq, is_circular=not linear_vector)
    ins = DnaConstruct(insert_name, insert_seq, is_circular=circular_insert)

    if mcs:
        region = _parse_mcs(mcs)
        try:
            vec = vec.copy(features=[region])
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        vec = auto_annotate(vec, find_mcs=False)
    else:
        vec = auto_annotate(
            vec, panel,
            window=settings.mcs_window,
            min_sites=settings.mcs_min_sites,
            padding=settings.mcs_padding,
            min_recognition_length=settings.min_recognition_length,
            allow_ambiguous=settings.allow_ambiguous,
            workers=n_workers,
        )
    ins = auto_annotate(ins, find_mcs=False)

    click.echo(f"\nVector: {vec.name} ({vec.length} bp, GC {gc_content(vec.sequence) * 100:.1f}%)")
    click.echo(f"Insert: {ins.name} ({ins.length} bp, GC {gc_content(ins.sequence) * 100:.1f}%)")
    if vec.mcs_feature is not None:
        click.echo(f"MCS: {vec.mcs_feature.start}-{vec.mcs_feature.end}")

    ranked = select_cloning_sites(
        vec, ins, panel,
        min_recognition_length=settings.min_recognition_length,
        allow_ambiguous=settings.allow_ambiguous,
        workers=n_workers,
    )

    if candidates:
        write_candidates_tsv(ranked, _output_path(settings, candidates))

    if not ranked and not enzyme:
        click.echo("\nNo compatible enzyme found")
        return

    click.echo(f"\n{len(ranked)} candidate enzyme(s):")
    for c in ranked[:10]:
        where = 'MCS' if c.in_mcs else '   '
        click.echo(f"  {c.enzyme_name:<10} {c.position:>7}  {where}  overhang {c.overhang_length}")

    try:
        chosen = get_enzyme(enzyme, panel) if enzyme else get_enzyme(ranked[0].enzyme_name, panel)
        recombinant = clone_into_vector(vec, ins, chosen, reverse=reverse)
    except ValueError as e:
        click.echo(f"Error cloning: {e}", err=True)
        sys.exit(1)

    click.echo(f"\nRecombinant: {recombinant.source_name}")
    click.echo(f"  {recombinant.length} bp, {len(recombinant.features)} feature(s)")

    if output:
        path = write_construct_fasta(recombinant, _output_path(settings, output))
        click.echo(f"Recombinant written to: {path}")


if __name__ == '__main__':
    cli()
