"""Catalog rows bundled with the service.

Same shape as the remote ``cdp_models`` table.  Backs the ``memory``
catalog backend used for local development.
"""

SEED_ROWS = [
    {"model": "SONY CDP-101", "dac": "CX20017", "laser": "Sony Original"},
    {"model": "SONY CDP-337ESD", "dac": "2 x TDA1541A", "laser": "KSS-190A"},
    {"model": "SONY CDP-555ESD", "dac": "TDA1541", "laser": "BU-1E"},
    {"model": "SONY CDP-X7ESD", "dac": "2 x PCM58P-S", "laser": "KSS-190A"},
    {"model": "SONY CDP-227ESD", "dac": "2 x TDA1541A", "laser": "KSS-151A"},
    {"model": "SONY CDP-750", "dac": "TDA1541", "laser": "KSS-150A"},
    {"model": "SONY CDP-M75", "dac": "TDA1541", "laser": "KSS-210A"},
    {"model": "SONY CDP-970", "dac": "2 x PCM58P", "laser": "KSS-150A"},
    {"model": "SONY CDP-X55ES", "dac": "CXD2552Q", "laser": "KSS-270A"},
    {"model": "MARANTZ CD-63MKII", "dac": "SM5872BS", "laser": "CDM-12.1"},
    {"model": "MARANTZ CD-67SE", "dac": "SM5872BS", "laser": "VAM1201"},
    {"model": "MARANTZ CD-17", "dac": "TDA1547 (DAC7)", "laser": "CDM-12.1"},
    {"model": "MARANTZ CD-94", "dac": "TDA1541A-S1", "laser": "CDM-1"},
    {"model": "MARANTZ CD-50", "dac": "TDA1541A", "laser": "CDM-4/19"},
    {"model": "MARANTZ CD-40", "dac": "TDA1541A", "laser": "CDM-4/19"},
    {"model": "MARANTZ CD-16", "dac": "2 x TDA1547", "laser": "CDM-4 Metallic"},
    {"model": "PHILIPS CD-104", "dac": "2 x TDA1540", "laser": "CDM-1"},
    {"model": "PHILIPS CD-304 MKII", "dac": "TDA1541A", "laser": "CDM-1"},
    {"model": "PHILIPS CD-650", "dac": "TDA1541", "laser": "CDM-2"},
    {"model": "PHILIPS CD-850", "dac": "2 x SAA7321GP", "laser": "CDM-4/19"},
    {"model": "PHILIPS CD-960", "dac": "TDA1541A", "laser": "CDM-1"},
    {"model": "DENON DCD-1500", "dac": "2 x PCM54HP-K", "laser": "KSS-121A"},
    {"model": "DENON DCD-1650AR", "dac": "4 x PCM1702", "laser": "Sharp H8147AF"},
    {"model": "DENON DCD-3500RG", "dac": "4 x PCM58P-K", "laser": "KSS-151A"},
    {"model": "KENWOOD DP-1100SG", "dac": "2 x PCM56P-K", "laser": "J91-0341-05"},
    {"model": "KENWOOD DP-7090", "dac": "8 x PCM1702", "laser": "KSS-213B"},
    {"model": "KENWOOD DP-8020", "dac": "2 x PCM1701P", "laser": "KSS-151A"},
    {"model": "YAMAHA CDX-10000", "dac": "2 x PCM56P-K", "laser": "MLP-7"},
    {"model": "YAMAHA CDX-2020", "dac": "4 x PCM58P-K", "laser": "TAOHS-HG1"},
    {"model": "YAMAHA CDX-993", "dac": "YAC514", "laser": "KSS-213C"},
    {"model": "TECHNICS SL-P1200", "dac": "2 x PCM54HP", "laser": "SOADP1241"},
    {"model": "TECHNICS SL-PS70", "dac": "MN6472 (MASH)", "laser": "SOAD70A"},
    {"model": "PIONEER PD-T07", "dac": "2 x PD2028B", "laser": "PEA1030"},
    {"model": "PIONEER PD-S505", "dac": "PD2024B", "laser": "PEA1291"},
    {"model": "TEAC VRDS-10", "dac": "2 x TDA1547", "laser": "KSS-151A"},
    {"model": "TEAC VRDS-25", "dac": "4 x AD1862N", "laser": "KSS-151A"},
    {"model": "NAKAMICHI OMS-7", "dac": "2 x PCM54HP", "laser": "Olympus TAOHS"},
    {"model": "NAKAMICHI CD4", "dac": "AD1864N", "laser": "KSS-210A"},
    {"model": "LUXMAN D-500X's", "dac": "TDA1541A-S1", "laser": "KSS-152A"},
    {"model": "LUXMAN D-105u", "dac": "2 x PCM1701P", "laser": "KSS-152A"},
]

for _i, _row in enumerate(SEED_ROWS, start=1):
    _row["id"] = _i
