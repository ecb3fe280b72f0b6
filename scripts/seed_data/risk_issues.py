"""
Demo risks and issues for the RiskWise dashboard.

Documents are written in the raw store format. Most use the field names of
the current entry forms; a few use the older camelCase schema so the
normalizer's legacy path has data to chew on.

  - 10 risks across 6 projects (joined by Project Code)
  - 8 issues across 5 projects (joined by ProjectName)
"""

RISK_DATA = [
    {"Month": "January", "Project Code": "P-12345", "Risk Status": "Open",
     "Title": "Key vendor may miss Q3 delivery",
     "Description": "Primary hardware vendor has flagged supply constraints that may delay the Q3 delivery.",
     "Probability": 0.7, "Imapct Rating (0.05-0.8)": 0.2,
     "MitigationPlan": "Qualify a second supplier", "ContingencyPlan": "Re-sequence rollout waves",
     "Impact Value ($)": 250000, "Budget Contingency": 100000,
     "Owner": "Alice Martin", "DueDate": "2026-06-30T00:00:00.000Z"},
    {"Month": "February", "Project Code": "P-12345", "Risk Status": "Mitigated",
     "Title": "Data centre power upgrade",
     "Description": "Power upgrade in the primary data centre could cause unplanned downtime.",
     "Probability": 0.3, "Imapct Rating (0.05-0.8)": 0.4,
     "Impact Value ($)": 80000, "Budget Contingency": 50000,
     "Owner": "Bob Chen", "DueDate": "2026-03-15T00:00:00.000Z"},
    {"Month": "February", "Project Code": "P-67890", "Risk Status": "Open",
     "Title": "Quantum simulator licence renewal",
     "Description": "Licence renewal for the simulator platform is pending procurement approval.",
     "Probability": 0.5, "Imapct Rating (0.05-0.8)": 0.8,
     "Impact Value ($)": 400000, "Budget Contingency": 150000,
     "Owner": "Carla Diaz", "DueDate": "2026-08-01T00:00:00.000Z"},
    {"Month": "March", "Project Code": "P-67890", "Risk Status": "Closed",
     "Title": "Lead architect attrition",
     "Description": "Lead architect has received an external offer and may leave the programme.",
     "Probability": 0.1, "Imapct Rating (0.05-0.8)": 0.4,
     "Impact Value ($)": 0, "Budget Contingency": 0,
     "Owner": "Carla Diaz"},
    {"Month": "March", "Project Code": "P-13579", "Risk Status": "Open",
     "Title": "Legacy API deprecation",
     "Description": "Upstream provider is deprecating the v1 API that the ingestion jobs depend on.",
     "Probability": 0.9, "Imapct Rating (0.05-0.8)": 0.1,
     "Impact Value ($)": 60000, "Budget Contingency": 70000,
     "Owner": "Dev Patel", "DueDate": "2026-09-30T00:00:00.000Z"},
    {"Month": "April", "Project Code": "P-97531", "Risk Status": "Transferred",
     "Title": "Cloud egress cost overrun",
     "Description": "Data egress during the migration window may exceed the negotiated allowance.",
     "Probability": 0.3, "Imapct Rating (0.05-0.8)": 0.2,
     "Impact Value ($)": 120000, "Budget Contingency": 20000,
     "Owner": "Erin Walsh", "DueDate": "2026-05-31T00:00:00.000Z"},
    {"Month": "April", "Project Code": "P-77889", "Risk Status": "Open",
     "Title": "Launch window slip",
     "Description": "Launch provider has not confirmed the window; a slip would add holding costs.",
     "Probability": 0.5, "Imapct Rating (0.05-0.8)": 0.4,
     "Impact Value ($)": 1500000, "Budget Contingency": 500000,
     "Owner": "Farah Nasser", "DueDate": "2026-07-15T00:00:00.000Z"},
    {"Month": "May", "Project Code": "P-89012", "Risk Status": "Open",
     "Title": "Regulatory review extension",
     "Description": "Safety regulator may extend the review period for the containment design.",
     "Probability": 0.7, "Imapct Rating (0.05-0.8)": 0.8,
     "Impact Value ($)": 3000000, "Budget Contingency": 1000000,
     "Owner": "Gustav Berg"},
    # Older camelCase documents
    {"month": "May", "projectCode": "P-13579", "riskStatus": "Open",
     "description": "Schema drift between source systems may break the nightly reconciliation.",
     "probability": "0.3", "impactRating": "0.1", "impactValue": "15,000",
     "budgetContingency": "10000", "owner": "Dev Patel", "dueDate": "2026-04-01"},
    {"month": "June", "projectCode": "P-00000", "riskStatus": "Open",
     "description": "Unregistered pilot project may consume shared test environments.",
     "probability": 0.2, "impactRating": 0.05, "owner": "Hana Sato"},
]

ISSUE_DATA = [
    {"Month": "January", "Category New": "Technical", "Portfolio": "System Integration",
     "Title": "Payment gateway timeouts",
     "Discussion": "Checkout calls to the payment gateway time out under peak load.",
     "Resolution": "Raise connection pool and add retries", "Due Date": "2026-02-28T00:00:00.000Z",
     "Owner": "Alice Martin", "Response": "In Progress", "Impact": "High",
     "Impact ($)": 45000, "Priority": "High", "ProjectName": "Project Phoenix", "Status": "Open"},
    {"Month": "February", "Category New": "Resource", "Portfolio": "Staffing",
     "Title": "QA team under capacity",
     "Discussion": "Two QA engineers are on leave during the regression cycle.",
     "Owner": "Bob Chen", "Response": "Under Review", "Impact": "Medium",
     "Priority": "Medium", "ProjectName": "Project Phoenix", "Status": "Escalated"},
    {"Month": "February", "Category New": "Contractual", "Portfolio": "Vendor Management",
     "Title": "Contract amendment unsigned",
     "Discussion": "Amendment covering the extended scope has not been countersigned by the vendor.",
     "Resolution": "Legal to chase vendor counsel", "Due Date": "2026-03-31T00:00:00.000Z",
     "Owner": "Carla Diaz", "Response": "Closed", "Impact": "Low",
     "Impact ($)": 0, "Priority": "Low", "ProjectName": "Quantum Leap Initiative", "Status": "Resolved"},
    {"Month": "March", "Category New": "Schedule", "Portfolio": "Milestone Slippage",
     "Title": "Design sign-off delayed",
     "Discussion": "Final design sign-off slipped two weeks because of stakeholder availability.",
     "Owner": "Erin Walsh", "Response": "In Progress", "Impact": "Medium",
     "Impact ($)": 30000, "Priority": "Critical", "ProjectName": "Cloud Migration Phase 2", "Status": "Open"},
    {"Month": "April", "Category New": "(15) Budget", "Portfolio": "Cost Control",
     "Title": "Contingency drawn down early",
     "Discussion": "Half of the contingency budget was used in the first quarter of delivery.",
     "Owner": "Farah Nasser", "Response": None, "Impact": "High",
     "Impact ($)": 200000, "Priority": "(1) High", "ProjectName": "Orion Space Probe", "Status": "Open"},
    {"Month": "April", "Category New": "Technical", "Portfolio": "Performance",
     "Title": "Telemetry backlog",
     "Discussion": "Telemetry ingestion is running six hours behind real time.",
     "Owner": "Dev Patel", "Impact": "Medium", "Impact ($)": "12,500",
     "Priority": "High", "ProjectName": "DataStream Integration", "Status": "Closed"},
    # Older camelCase documents
    {"month": "May", "category": "(13) Supply", "subCategory": "Logistics",
     "title": "Customs hold on sensor shipment",
     "discussion": "Sensor shipment is held at customs pending paperwork.",
     "owner": "Gustav Berg", "impact": "High", "impactValue": 90000,
     "projectName": "Fusion Core Reactor", "status": "Open", "dueDate": "2026-06-15"},
    {"month": "June", "title": "Shared test rig double-booked",
     "discussion": "Two teams booked the same hardware test rig for the same week.",
     "owner": "Hana Sato", "projectName": "Skunkworks Pilot", "status": "Open"},
]
