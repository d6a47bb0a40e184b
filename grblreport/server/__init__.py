"""Host connection side: reporter facade, query dispatch, transports and simulation."""
