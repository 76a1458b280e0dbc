"""
SQL statements for the read side, keyed by table then by use.

Repositories take this table in their constructor, so tests and callers can
swap statements without touching module state. Every statement that feeds
merge_rows must order rows by the parent key first, then by each child
relation's key; see huautla.merge.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

_EVENT_COLUMNS = """
           e.uuid,
           e.temperature,
           e.humidity,
           e.mtime,
           e.ctime,
           et.uuid as eventtype_uuid,
           et.name as eventtype_name,
           et.severity as eventtype_severity,
           st.uuid as stage_uuid,
           st.name as stage_name"""

# Events crossed with their notes and their photos: one row per
# (note, photo) pair, so both relations repeat.
_EVENT_FANOUT = f"""
    select {_EVENT_COLUMNS},
           n.uuid as note_uuid,
           n.note as note_note,
           n.mtime as note_mtime,
           n.ctime as note_ctime,
           p.uuid as photo_uuid,
           p.filename as photo_filename,
           p.mtime as photo_mtime,
           p.ctime as photo_ctime
      from events e
      join event_types et
        on e.eventtype_uuid = et.uuid
      join stages st
        on et.stage_uuid = st.uuid
      left join notes n
        on n.observable_uuid = e.uuid
      left join event_photos p
        on p.observable_uuid = e.uuid"""

_EVENT_FANOUT_ORDER = """
     order
        by e.mtime desc,
           e.uuid,
           n.mtime desc,
           n.uuid,
           p.mtime desc,
           p.uuid"""

_SUBSTRATE_COLUMNS = """
           {p}.uuid as {p}_uuid,
           {p}.name as {p}_name,
           {p}.type as {p}_type,
           {p}v.uuid as {p}_vendor_uuid,
           {p}v.name as {p}_vendor_name,
           {p}v.website as {p}_vendor_website"""

# A source's strain is its progenitor when that is a strain, otherwise the
# strain of the lifecycle whose event it came from.
_SOURCE_JOIN = """
      left join sources so
        on so.generation_uuid = g.uuid
      left join events soe
        on soe.uuid = so.progenitor_uuid
      left join lifecycles solc
        on solc.uuid = soe.observable_uuid
      left join strains sos
        on sos.uuid = coalesce(solc.strain_uuid, so.progenitor_uuid)
      left join vendors sov
        on sov.uuid = sos.vendor_uuid"""

_SOURCE_COLUMNS = """
           so.uuid as source_uuid,
           so.type as source_type,
           soe.uuid as source_event_uuid,
           solc.uuid as source_lifecycle_uuid,
           sos.uuid as source_strain_uuid,
           sos.name as source_strain_name,
           sos.species as source_strain_species,
           sos.ctime as source_strain_ctime,
           sov.uuid as source_strain_vendor_uuid,
           sov.name as source_strain_vendor_name,
           sov.website as source_strain_vendor_website"""

_GENERATION_FROM = f"""
    select g.uuid,
           g.mtime,
           g.ctime,
           g.dtime,{_SUBSTRATE_COLUMNS.format(p="plating")},{_SUBSTRATE_COLUMNS.format(p="liquid")},{_SOURCE_COLUMNS}
      from generations g
      join substrates plating
        on g.plating_substrate_uuid = plating.uuid
      join vendors platingv
        on plating.vendor_uuid = platingv.uuid
      join substrates liquid
        on g.liquid_substrate_uuid = liquid.uuid
      join vendors liquidv
        on liquid.vendor_uuid = liquidv.uuid{_SOURCE_JOIN}"""

_GENERATION_ORDER = """
     order
        by g.ctime desc,
           g.uuid,
           sos.name,
           so.uuid"""

_LIFECYCLE_FROM = f"""
    select lc.uuid,
           lc.name,
           lc.location,
           lc.strain_cost,
           lc.grain_cost,
           lc.bulk_cost,
           lc.yield,
           lc.headcount,
           lc.gross,
           lc.mtime,
           lc.ctime,
           s.uuid as strain_uuid,
           s.name as strain_name,
           s.species as strain_species,
           s.ctime as strain_ctime,
           sv.uuid as strain_vendor_uuid,
           sv.name as strain_vendor_name,
           sv.website as strain_vendor_website,{_SUBSTRATE_COLUMNS.format(p="grain")},{_SUBSTRATE_COLUMNS.format(p="bulk")}{{extra_columns}}
      from lifecycles lc
      join strains s
        on lc.strain_uuid = s.uuid
      join vendors sv
        on s.vendor_uuid = sv.uuid
      join substrates grain
        on lc.grainsubstrate_uuid = grain.uuid
      join vendors grainv
        on grain.vendor_uuid = grainv.uuid
      join substrates bulk
        on lc.bulksubstrate_uuid = bulk.uuid
      join vendors bulkv
        on bulk.vendor_uuid = bulkv.uuid"""

_LIFECYCLE_EVENT_COLUMNS = """,
           e.uuid as event_uuid,
           e.temperature as event_temperature,
           e.humidity as event_humidity,
           e.mtime as event_mtime,
           e.ctime as event_ctime,
           et.uuid as event_eventtype_uuid,
           et.name as event_eventtype_name,
           et.severity as event_eventtype_severity,
           st.uuid as event_stage_uuid,
           st.name as event_stage_name"""

_STRAIN_FROM = """
    select s.uuid as strain_uuid,
           s.name as strain_name,
           s.species as strain_species,
           s.ctime as strain_ctime,
           s.generation_uuid as strain_generation_uuid,
           v.uuid as strain_vendor_uuid,
           v.name as strain_vendor_name,
           v.website as strain_vendor_website,
           sa.uuid as attribute_uuid,
           sa.name as attribute_name,
           sa.value as attribute_value
      from strains s
      join vendors v
        on s.vendor_uuid = v.uuid
      left join strain_attributes sa
        on sa.strain_uuid = s.uuid"""

_STRAIN_ORDER = """
     order
        by s.name,
           s.uuid,
           sa.name,
           sa.uuid"""

STATEMENTS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "event": {
            "all-by-observable": f"""{_EVENT_FANOUT}
     where e.observable_uuid = $1{_EVENT_FANOUT_ORDER}""",
            "select": f"""{_EVENT_FANOUT}
     where e.uuid = $1{_EVENT_FANOUT_ORDER}""",
            "all-by-eventtype": f"""
    select {_EVENT_COLUMNS}
      from events e
      join event_types et
        on e.eventtype_uuid = et.uuid
      join stages st
        on et.stage_uuid = st.uuid
     where et.uuid = $1
     order
        by e.mtime desc,
           e.uuid""",
        },
        "note": {
            "get": """
    select uuid,
           note,
           mtime,
           ctime
      from notes
     where observable_uuid = $1
     order
        by mtime desc,
           uuid""",
        },
        "eventphoto": {
            # photos of an event or a strain; notes oldest first, PhotoRepo prepends them
            "get": """
    select p.uuid,
           p.filename,
           p.mtime,
           p.ctime,
           n.uuid as note_uuid,
           n.note as note_note,
           n.mtime as note_mtime,
           n.ctime as note_ctime
      from event_photos p
      left join notes n
        on n.observable_uuid = p.uuid
     where p.observable_uuid = $1
     order
        by p.mtime desc,
           p.uuid,
           n.mtime,
           n.uuid""",
        },
        "source": {
            "get": f"""
    select g.uuid,{_SOURCE_COLUMNS}
      from generations g{_SOURCE_JOIN}
     where g.uuid = $1
       and so.uuid is not null
     order
        by sos.name,
           so.uuid""",
        },
        "generation": {
            "ndx": f"""{_GENERATION_FROM}
     where g.dtime is null{_GENERATION_ORDER}""",
            "select": f"""{_GENERATION_FROM}
     where ($1::uuid is null or g.uuid = $1)
       and ($2::uuid is null or exists (
               select 1
                 from sources s2
                 left join events e2
                   on e2.uuid = s2.progenitor_uuid
                 left join lifecycles lc2
                   on lc2.uuid = e2.observable_uuid
                where s2.generation_uuid = g.uuid
                  and coalesce(lc2.strain_uuid, s2.progenitor_uuid) = $2))
       and ($3::uuid is null or g.plating_substrate_uuid = $3)
       and ($4::uuid is null or g.liquid_substrate_uuid = $4)
       and ($5::uuid is null or exists (
               select 1
                 from events e3
                where e3.observable_uuid = g.uuid
                  and e3.eventtype_uuid = $5)){_GENERATION_ORDER}""",
        },
        "lifecycle": {
            "index": _LIFECYCLE_FROM.format(extra_columns=_LIFECYCLE_EVENT_COLUMNS)
            + """
      left join events e
        on e.observable_uuid = lc.uuid
      left join event_types et
        on e.eventtype_uuid = et.uuid
      left join stages st
        on et.stage_uuid = st.uuid
     order
        by lc.mtime desc,
           lc.uuid,
           e.mtime desc,
           e.uuid""",
            "select": _LIFECYCLE_FROM.format(extra_columns="")
            + """
     where ($1::uuid is null or lc.uuid = $1)
       and ($2::uuid is null or lc.strain_uuid = $2)
       and ($3::uuid is null or lc.grainsubstrate_uuid = $3)
       and ($4::uuid is null or lc.bulksubstrate_uuid = $4)
       and ($5::uuid is null or exists (
               select 1
                 from events e5
                where e5.observable_uuid = lc.uuid
                  and e5.eventtype_uuid = $5))
     order
        by lc.mtime desc,
           lc.uuid""",
        },
        "strain": {
            "select": f"""{_STRAIN_FROM}
     where ($1::uuid is null or s.uuid = $1)
       and ($2::uuid is null or s.vendor_uuid = $2){_STRAIN_ORDER}""",
            # the strain isolated from a generation
            "generated": f"""{_STRAIN_FROM}
     where s.generation_uuid = $1{_STRAIN_ORDER}""",
        },
        "strainattribute": {
            "all": """
    select uuid as attribute_uuid,
           name as attribute_name,
           value as attribute_value
      from strain_attributes
     where strain_uuid = $1
     order
        by name,
           uuid""",
        },
        "substrate": {
            "select": """
    select s.uuid as substrate_uuid,
           s.name as substrate_name,
           s.type as substrate_type,
           v.uuid as substrate_vendor_uuid,
           v.name as substrate_vendor_name,
           v.website as substrate_vendor_website,
           i.uuid as ingredient_uuid,
           i.name as ingredient_name
      from substrates s
      join vendors v
        on s.vendor_uuid = v.uuid
      left join substrate_ingredients si
        on si.substrate_uuid = s.uuid
      left join ingredients i
        on i.uuid = si.ingredient_uuid
     where ($1::uuid is null or s.uuid = $1)
       and ($2::uuid is null or s.vendor_uuid = $2)
     order
        by s.name,
           s.uuid,
           i.name,
           i.uuid""",
        },
        "ingredient": {
            "all-by-substrate": """
    select i.uuid as ingredient_uuid,
           i.name as ingredient_name
      from substrate_ingredients si
      join ingredients i
        on i.uuid = si.ingredient_uuid
     where si.substrate_uuid = $1
     order
        by i.name,
           i.uuid""",
        },
        "eventtype": {
            "select": """
    select e.uuid as eventtype_uuid,
           e.name as eventtype_name,
           e.severity as eventtype_severity,
           s.uuid as stage_uuid,
           s.name as stage_name
      from event_types e
      join stages s
        on e.stage_uuid = s.uuid
     where e.uuid = $1""",
        },
    }
)
