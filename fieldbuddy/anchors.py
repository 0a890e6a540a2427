"""
Frozen anchor set for field-guidance constants with brief origin notes.

These values document the rule-of-thumb behaviour of the field tool.
Tests assert no drift relative to these values. Update this file
deliberately when retuning, together with the expected outputs in tests.
"""

ANCHORS: dict[str, float | int | str] = {
    # Duct sizing defaults (Manual D style heuristics)
    "TRUNK_FPM": 800,            # FPM
    "BRANCH_FPM": 700,           # FPM
    "TRUNK_MIN_DIA": 8,          # in
    "TRUNK_MAX_DIA": 24,         # in
    "BRANCH_MIN_DIA": 6,         # in
    "BRANCH_MAX_DIA": 16,        # in
    "DUCT_MIN_DIA": 6,           # in
    "DUCT_MAX_DIA": 24,          # in
    "RECT_ASPECT": 2,            # W:H
    "RECT_MIN_W": 6,             # in
    "RECT_MIN_H": 6,             # in
    "BRANCHES_PER_SUB": 5,
    "FACE_FPM": 500,             # FPM, grille/register face velocity ceiling
    "PLAN_RETURN_FPM": 450,      # FPM, plan-level return target

    # Friction rate quick defaults
    "ESP_DEFAULT": 0.5,          # in.w.c.
    "EQL_DEFAULT": 150,          # ft
    "DROPS_DEFAULT": 0.2,        # in.w.c.

    # Airflow by tonnage, or by floor area when tonnage is unknown
    "CFM_PER_TON": 400,
    "CFM_PER_SQFT": 0.8,         # CFM per ft² of conditioned floor
    "AIRFLOW_LOW_FACTOR": 0.875,
    "AIRFLOW_HIGH_FACTOR": 1.05,

    # Targets
    "DELTA_T_TARGET_LOW": 16,    # °F
    "DELTA_T_TARGET_HIGH": 22,   # °F
    "SUBCOOL_TARGET_R410A": 10,  # °F
    "SUBCOOL_TARGET_OTHER": 8,   # °F
    "SH_TARGET_TXV": 10,         # °F
    "SH_TARGET_FIXED": 12,       # °F

    # Health evaluation
    "DELTA_T_LOW": 14,
    "DELTA_T_HIGH": 24,
    "TXV_SUBCOOL_LOW": 6,
    "TXV_SUBCOOL_HIGH": 14,
    "TXV_SH_LOW": 5,
    "TXV_SH_HIGH": 20,
    "FIXED_SH_LOW": 8,
    "FIXED_SH_HIGH": 25,
    "FIXED_SUBCOOL_LOW": 5,
    "FIXED_SUBCOOL_HIGH": 15,

    # Charge adjustment bands
    "CHARGE_SUBCOOL_BAND": 2,    # ± °F around target subcool (TXV)
    "CHARGE_SH_BAND": 3,         # ± °F around target superheat (fixed orifice)
    "CHARGE_SUBCOOL_TARGET": 10,
    "CHARGE_SH_TARGET": 12,

    "DEFAULT_REFRIGERANT": "R410A",
    "DEFAULT_METERING": "txv",
}

# Origins (free-text for docs)
ORIGINS: dict[str, str] = {
    "TRUNK_FPM": "Residential trunk velocity ceiling for quiet supply runs",
    "PLAN_RETURN_FPM": "Plan returns sized a step below the 500 FPM grille ceiling",
    "CFM_PER_TON": "Nominal 400 CFM/ton; 350..420 covers humid/dry climates",
    "CFM_PER_SQFT": "Rough planning rule for when the equipment size is not known yet",
    "TXV_SUBCOOL_LOW": "Field guidance: TXV systems are charged by subcool",
    "FIXED_SH_LOW": "Field guidance: fixed orifice systems are charged by superheat",
    "CHARGE_SH_BAND": "Superheat charts vary with outdoor ambient, so the band is wider",
}
