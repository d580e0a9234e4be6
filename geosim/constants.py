# geosim/constants.py
from typing import Dict

MS_PER_DAY = 86_400_000

# --- Treaties ---
TREATY_NAP      = "nap"
TREATY_ALLIANCE = "alliance"
TREATIES = (TREATY_NAP, TREATY_ALLIANCE)

# --- Player Diplomacy Actions ---
IMPROVE_RELATIONS = "improve_relations"
SEND_AID          = "send_aid"
SIGN_NAP          = "sign_nap"
RENOUNCE_NAP      = "renounce_nap"
FORM_ALLIANCE     = "form_alliance"
LEAVE_ALLIANCE    = "leave_alliance"
DECLARE_WAR       = "declare_war"
OFFER_PEACE       = "offer_peace"

# Cost field on DiplomacyRules for each action.
ACTION_COST_FIELD: Dict[str, str] = {
    IMPROVE_RELATIONS: "improve_cost",
    SEND_AID:          "aid_cost",
    SIGN_NAP:          "nap_cost",
    RENOUNCE_NAP:      "renounce_nap_cost",
    FORM_ALLIANCE:     "alliance_cost",
    LEAVE_ALLIANCE:    "leave_alliance_cost",
    DECLARE_WAR:       "declare_war_cost",
    OFFER_PEACE:       "peace_cost",
}

# --- Refresh Reasons ---
REFRESH_DAY        = "day"
REFRESH_WAR        = "war"
REFRESH_ANNEX      = "annexation"
REFRESH_DIPLOMACY  = "diplomacy"
REFRESH_ECONOMY    = "economy"
